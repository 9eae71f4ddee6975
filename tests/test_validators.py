from utils.validators import DataSanitizer, RequestValidator


def test_time_of_day():
    assert RequestValidator.validate_time_of_day("09:30")
    assert not RequestValidator.validate_time_of_day("24:00")
    assert RequestValidator.validate_time_of_day("24:00", allow_end_of_day=True)
    assert not RequestValidator.validate_time_of_day("9.30")
    assert not RequestValidator.validate_time_of_day(None)


def test_dates_and_datetimes():
    assert RequestValidator.validate_date("2025-03-03")
    assert not RequestValidator.validate_date("2025-02-30")
    assert RequestValidator.validate_datetime("2025-03-03T10:00:00+09:00")
    assert RequestValidator.validate_datetime("2025-03-03T01:00:00Z")
    assert not RequestValidator.validate_datetime("2025-03-03 10:00")


def test_event_request():
    valid = {"title": "Sync", "startDateTime": "2025-03-03T10:00:00+09:00",
             "endDateTime": "2025-03-03T11:00:00+09:00"}
    assert RequestValidator.validate_event_request(valid) == []

    errors = RequestValidator.validate_event_request({"title": 3, "startDateTime": "tomorrow"})
    assert "Missing required field: endDateTime" in errors
    assert "'title' must be a string" in errors
    assert any(e.startswith("Invalid startDateTime") for e in errors)


def test_snapshot_structure():
    assert RequestValidator.validate_snapshot_structure(None) == []
    assert RequestValidator.validate_snapshot_structure([]) == ["'snapshot' must be an object"]
    errors = RequestValidator.validate_snapshot_structure({"exceptions": {}, "personalTimes": ["x"]})
    assert errors == ["'snapshot.exceptions' must be a list", "'snapshot.personalTimes[0]' must be an object"]


def test_recurring_request():
    ok = {"days": [0], "startTime": "23:00", "endTime": "07:00"}
    assert RequestValidator.validate_recurring_request(ok) == []
    assert RequestValidator.validate_recurring_request({"specificDate": "2025-03-03", "startTime": "09:00",
                                                        "endTime": "24:00"}) == []
    errors = RequestValidator.validate_recurring_request({"days": 1, "startTime": "9", "endTime": "10:00"})
    assert errors == ["Invalid startTime: 9. Expected: HH:MM", "'days' must be a list"]


def test_date_range():
    assert RequestValidator.validate_date_range({"startDate": "2025-03-03", "endDate": "2025-03-04"}) == []
    assert RequestValidator.validate_date_range({"startDate": "03/03/2025"}) == [
        "Invalid startDate: 03/03/2025. Expected: YYYY-MM-DD",
        "Missing required field: endDate",
    ]


def test_sanitizer_cleans_free_text_only():
    data = {"title": "  Team\n\nsync <script> ", "location": "Room 'A'", "startTime": "09:00"}
    cleaned = DataSanitizer.sanitize_request(data)
    assert cleaned == {"title": "Team sync script", "location": "Room 'A'", "startTime": "09:00"}
    assert data["title"].startswith("  ")


def test_sanitizer_cleans_snapshot_titles_the_same_way():
    data = {
        "title": "Mom's  birthday",
        "snapshot": {"exceptions": [{"title": " Mom's birthday ", "location": "<Home>"}], "weekdayBase": 1},
    }
    cleaned = DataSanitizer.sanitize_request(data)
    assert cleaned["title"] == "Mom's birthday"
    assert cleaned["snapshot"]["exceptions"] == [{"title": "Mom's birthday", "location": "Home"}]
    assert cleaned["snapshot"]["weekdayBase"] == 1
    assert data["snapshot"]["exceptions"][0]["title"] == " Mom's birthday "
