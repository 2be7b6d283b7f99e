import pytest

from rides.datasets import load_datasets, load_datasets_from_dir, parse_csv
from rides.errors import DataValidationError, NotFoundError
from rides.models import RideRecord, UserRecord


def test_parse_csv_builds_rows_from_header():
    rows = parse_csv("a,b,c\n1,2,3\n4,5,6")
    assert rows == [{"a": "1", "b": "2", "c": "3"}, {"a": "4", "b": "5", "c": "6"}]


def test_parse_csv_trims_whitespace_and_crlf():
    rows = parse_csv(" Ride ID , Distance (miles) \r\n A001 ,  6.15 \r\n")
    assert rows == [{"Ride ID": "A001", "Distance (miles)": "6.15"}]


def test_short_rows_lack_trailing_keys_and_long_rows_are_cut():
    rows = parse_csv("a,b,c\n1,2\n1,2,3,4")
    assert rows[0] == {"a": "1", "b": "2"}
    assert "c" not in rows[0]
    assert rows[1] == {"a": "1", "b": "2", "c": "3"}


def test_quotes_are_not_special():
    # the input format has no quoting: an embedded comma splits the field
    rows = parse_csv('name,city\n"Smith, J",Reading')
    assert rows == [{"name": '"Smith', "city": 'J"'}]


def test_blank_lines_and_empty_text():
    assert parse_csv("") == []
    assert parse_csv("   \n  ") == []
    assert parse_csv("a,b\n\n1,2\n\n") == [{"a": "1", "b": "2"}]
    assert parse_csv("a,b") == []


def test_datasets_lookup(datasets):
    assert datasets.get_user("U001")["Current Latitude"] == "40.81395"
    assert datasets.get_ride("A001")["Distance (miles)"] == "6.15"
    assert datasets.find_user("U999") is None

    with pytest.raises(NotFoundError):
        datasets.get_user("U999")
    with pytest.raises(NotFoundError):
        datasets.get_ride("A999")


def test_duplicate_ids_keep_first_row():
    datasets = load_datasets("", "User ID,Current Latitude\nU1,1\nU1,2", "")
    assert datasets.get_user("U1")["Current Latitude"] == "1"


def test_load_datasets_from_dir(tmp_path):
    (tmp_path / "historical_rides.csv").write_text("Ride ID,Distance (miles)\nR1,5")
    (tmp_path / "users.csv").write_text("User ID,Current Latitude,Current Longitude,Historical Ride Acceptance Rate\nU1,1,2,0.5")
    (tmp_path / "available_rides.csv").write_text("Ride ID,Origin Latitude,Origin Longitude,Distance (miles)\nA1,1,2,3")

    datasets = load_datasets_from_dir(str(tmp_path))

    assert len(datasets.historical) == 1
    assert UserRecord.from_row(datasets.get_user("U1")).acceptance_rate == 0.5
    assert RideRecord.from_row(datasets.get_ride("A1")).distance_miles == 3.0


# -------------------------
# Record conversion
# -------------------------

def test_user_from_row():
    user = UserRecord.from_row({
        "User ID": "U001",
        "Current Latitude": "40.81395",
        "Current Longitude": "-76.34354",
        "Historical Ride Acceptance Rate": "0.81",
    })
    assert user == UserRecord(id="U001", location=(40.81395, -76.34354), acceptance_rate=0.81)


def test_ride_from_row_reads_optional_fields():
    ride = RideRecord.from_row({
        "Ride ID": "R0001",
        "Origin Latitude": "40.83091",
        "Origin Longitude": "-77.15878",
        "Destination Latitude": "41.35899",
        "Destination Longitude": "-77.0563",
        "Distance (miles)": "9.15",
        "Time of Day (24hr)": "12:00",
        "Day of Week": "Saturday",
    })
    assert ride.origin == (40.83091, -77.15878)
    assert ride.destination == (41.35899, -77.0563)
    assert ride.scheduled_time == "12:00"
    assert ride.day_of_week == "Saturday"
    assert ride.details["Ride ID"] == "R0001"


def test_ride_without_destination_or_time():
    ride = RideRecord.from_row({"Ride ID": "A1", "Origin Latitude": "1", "Origin Longitude": "2", "Distance (miles)": "3"})
    assert ride.destination is None
    assert ride.scheduled_time is None
    assert ride.day_of_week is None


@pytest.mark.parametrize("field, value", [
    ("Origin Latitude", ""),
    ("Origin Longitude", "west"),
    ("Distance (miles)", "NaN"),
    ("Distance (miles)", "-2"),
])
def test_ride_validation_names_field_and_record(field, value):
    row = {"Ride ID": "A7", "Origin Latitude": "1", "Origin Longitude": "2", "Distance (miles)": "3"}
    row[field] = value

    with pytest.raises(DataValidationError) as excinfo:
        RideRecord.from_row(row)

    assert excinfo.value.record_id == "A7"
    assert excinfo.value.field == field
    assert "A7" in str(excinfo.value)


def test_missing_column_is_a_validation_error():
    with pytest.raises(DataValidationError) as excinfo:
        UserRecord.from_row({"User ID": "U1", "Current Latitude": "1", "Current Longitude": "2"})
    assert excinfo.value.field == "Historical Ride Acceptance Rate"


def test_half_a_destination_is_rejected():
    row = {"Ride ID": "A1", "Origin Latitude": "1", "Origin Longitude": "2", "Distance (miles)": "3",
           "Destination Latitude": "4"}
    with pytest.raises(DataValidationError) as excinfo:
        RideRecord.from_row(row)
    assert excinfo.value.field == "Destination Longitude"
