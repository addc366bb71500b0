from datetime import datetime

import pytest

from sbs_samples import BASE_NS, ICAO, make_record
from waxmoth.domain import MessageType
from waxmoth.ingestors.sbs1 import (
    FieldCountError,
    FieldParseError,
    IcaoError,
    SubtypeError,
    TimestampError,
    parse_sbs_message,
    parse_timestamp,
)

EXAMPLE = (
    "MSG,3,1,1,4CA2B4,1,2023/01/01,12:00:00.000,2023/01/01,12:00:00.100,"
    ",35000,,,51.5074,-0.1278,,,0,0,0,0"
)


def test_parse_airborne_position_report():
    message = parse_sbs_message("radar1:30003", EXAMPLE)

    assert message.station == "radar1:30003"
    assert message.type is MessageType.TRANSMISSION
    assert message.subtype == 3
    assert message.icao == ICAO
    assert message.generated_ns == BASE_NS
    assert message.logged_ns == BASE_NS + 100_000_000
    assert message.generated_at == datetime(2023, 1, 1, 12, 0, 0)
    assert message.logged_at == datetime(2023, 1, 1, 12, 0, 0, 100000)
    assert message.altitude == 35000
    assert message.location == (51.5074, -0.1278)
    assert message.squawk_alert is False
    assert message.emergency is False
    assert message.ident_active is False
    assert message.on_ground is False
    assert message.ground_speed is None
    assert message.call_sign is None
    assert message.raw == EXAMPLE


def test_parse_accepts_bytes():
    message = parse_sbs_message("radar1:30003", EXAMPLE.encode())

    assert message == parse_sbs_message("radar1:30003", EXAMPLE)


@pytest.mark.parametrize("record", [EXAMPLE + ",", EXAMPLE.rsplit(",", 1)[0], "", "MSG"])
def test_wrong_field_count_is_rejected(record):
    with pytest.raises(FieldCountError):
        parse_sbs_message("radar1:30003", record)


def test_field_count_checked_before_content():
    garbage = ",".join(["not-a-field"] * 21)

    with pytest.raises(FieldCountError) as excinfo:
        parse_sbs_message("radar1:30003", garbage)
    assert excinfo.value.count == 21


@pytest.mark.parametrize(
    "code, expected",
    [
        ("SEL", MessageType.SELECTION_CHANGE),
        ("ID", MessageType.ID_CHANGE),
        ("AIR", MessageType.NEW_AIRCRAFT),
        ("STA", MessageType.STATUS_CHANGE),
        ("CLK", MessageType.CLICK),
        ("msg", MessageType.INVALID),
        ("XYZ", MessageType.INVALID),
    ],
)
def test_message_type_codes(code, expected):
    message = parse_sbs_message("radar1:30003", make_record(msg_type=code, altitude="100"))

    assert message.type is expected
    assert message.subtype is None
    assert message.altitude is None


def test_id_change_copies_call_sign_verbatim():
    record = make_record(msg_type="ID", call_sign="BAW123  ", altitude="35000")

    message = parse_sbs_message("radar1:30003", record)

    assert message.call_sign == "BAW123  "
    assert message.altitude is None
    assert message.on_ground is None


@pytest.mark.parametrize("subtype", ["", "x", "0", "9", "-1", " 3"])
def test_bad_subtype_is_rejected(subtype):
    with pytest.raises(SubtypeError):
        parse_sbs_message("radar1:30003", make_record(subtype=subtype))


def test_subtype_ignored_for_non_transmission():
    message = parse_sbs_message("radar1:30003", make_record(msg_type="AIR", subtype=""))

    assert message.type is MessageType.NEW_AIRCRAFT


@pytest.mark.parametrize("icao", ["", "ZZZZZZ", "0x4CA2B4", "-4CA2B4", "4CA 2B4", "1FFFFFFFF"])
def test_bad_icao_is_rejected(icao):
    with pytest.raises(IcaoError):
        parse_sbs_message("radar1:30003", make_record(icao=icao))


def test_lower_case_icao_is_accepted():
    message = parse_sbs_message("radar1:30003", make_record(icao="4ca2b4", altitude="1", lat="1", lon="2"))

    assert message.icao == ICAO


def test_excess_fractional_digits_are_truncated():
    assert parse_timestamp("2023/01/01", "12:00:00.123456789999") == BASE_NS + 123456789


def test_timestamp_without_fraction():
    assert parse_timestamp("2023/01/01", "12:00:00") == BASE_NS


@pytest.mark.parametrize(
    "gen_date, gen_time",
    [
        ("2023/13/01", "12:00:00.000"),
        ("2023-01-01", "12:00:00.000"),
        ("2023/01/01", "25:00:00.000"),
        ("2023/01/01", "12:00:00."),
        ("2023/01/01", ""),
        ("", ""),
    ],
)
def test_bad_timestamp_is_rejected(gen_date, gen_time):
    record = make_record(gen_date=gen_date, gen_time=gen_time, altitude="1", lat="1", lon="1")

    with pytest.raises(TimestampError) as excinfo:
        parse_sbs_message("radar1:30003", record)
    assert excinfo.value.field == "generated"


def test_bad_logged_timestamp_is_rejected():
    record = make_record(log_time="noon", altitude="1", lat="1", lon="1")

    with pytest.raises(TimestampError) as excinfo:
        parse_sbs_message("radar1:30003", record)
    assert excinfo.value.field == "logged"


def test_subtype_one_call_sign():
    message = parse_sbs_message("radar1:30003", make_record(subtype="1", call_sign="EZY12AB"))

    assert message.call_sign == "EZY12AB"
    assert message.on_ground is None


def test_subtype_two_surface_position():
    record = make_record(
        subtype="2",
        altitude="0",
        ground_speed="12.5",
        track="270.0",
        lat="51.47",
        lon="-0.45",
        on_ground="-1",
    )

    message = parse_sbs_message("radar1:30003", record)

    assert message.altitude == 0
    assert message.ground_speed == 12.5
    assert message.track == 270.0
    assert message.location == (51.47, -0.45)
    assert message.on_ground is True
    assert message.squawk_alert is None


def test_subtype_two_malformed_altitude():
    record = make_record(
        subtype="2", altitude="12a00", ground_speed="1", track="2", lat="3", lon="4"
    )

    with pytest.raises(FieldParseError) as excinfo:
        parse_sbs_message("radar1:30003", record)
    assert excinfo.value.subtype == 2
    assert excinfo.value.field == "altitude"


def test_required_field_cannot_be_blank():
    with pytest.raises(FieldParseError) as excinfo:
        parse_sbs_message("radar1:30003", make_record(subtype="3", altitude="35000", lat="51.5"))
    assert excinfo.value.field == "longitude"


def test_subtype_four_optional_fields():
    message = parse_sbs_message(
        "radar1:30003", make_record(subtype="4", ground_speed="451.0", track="", vertical="-640")
    )

    assert message.ground_speed == 451.0
    assert message.track is None
    assert message.vertical_rate == -640


def test_subtype_four_all_blank():
    message = parse_sbs_message("radar1:30003", make_record(subtype="4"))

    assert (message.ground_speed, message.track, message.vertical_rate) == (None, None, None)


@pytest.mark.parametrize(
    "field_name, overrides",
    [
        ("ground_speed", {"ground_speed": "fast"}),
        ("track", {"track": "nan"}),
        ("vertical_rate", {"vertical": "64.5"}),
    ],
)
def test_subtype_four_malformed_optional_field(field_name, overrides):
    with pytest.raises(FieldParseError) as excinfo:
        parse_sbs_message("radar1:30003", make_record(subtype="4", **overrides))
    assert excinfo.value.subtype == 4
    assert excinfo.value.field == field_name


def test_subtype_five_flags():
    message = parse_sbs_message(
        "radar1:30003",
        make_record(subtype="5", altitude="12000", alert="1", emergency="1", spi="1"),
    )

    assert message.altitude == 12000
    assert message.squawk_alert is True
    assert message.ident_active is True
    assert message.on_ground is False
    assert message.emergency is None


def test_subtype_six_squawk_with_blank_altitude():
    message = parse_sbs_message(
        "radar1:30003", make_record(subtype="6", squawk="7700", emergency="-1")
    )

    assert message.squawk == 7700
    assert message.altitude is None
    assert message.emergency is True


def test_subtype_six_requires_squawk():
    with pytest.raises(FieldParseError) as excinfo:
        parse_sbs_message("radar1:30003", make_record(subtype="6", altitude="100"))
    assert excinfo.value.field == "squawk"


def test_subtype_seven_and_eight():
    seven = parse_sbs_message("radar1:30003", make_record(subtype="7", altitude="+3500"))
    eight = parse_sbs_message("radar1:30003", make_record(subtype="8", on_ground="1"))

    assert seven.altitude == 3500
    assert seven.on_ground is False
    assert eight.on_ground is True
    assert eight.altitude is None


def test_parse_is_deterministic():
    bad = make_record(subtype="2", altitude="x", ground_speed="1", track="2", lat="3", lon="4")

    assert parse_sbs_message("a", EXAMPLE) == parse_sbs_message("a", EXAMPLE)
    errors = []
    for _ in range(2):
        with pytest.raises(FieldParseError) as excinfo:
            parse_sbs_message("a", bad)
        errors.append((type(excinfo.value), str(excinfo.value)))
    assert errors[0] == errors[1]


def test_record_rebuilt_from_message_parses_back():
    parsed = parse_sbs_message(
        "radar1:30003",
        make_record(
            subtype="2",
            gen_time="12:34:56.789",
            altitude="1200",
            ground_speed="145.5",
            track="88.25",
            lat="51.4775",
            lon="-0.4614",
            on_ground="0",
        ),
    )

    rebuilt = make_record(
        subtype=str(parsed.subtype),
        icao=f"{parsed.icao:06X}",
        gen_date=parsed.generated_at.strftime("%Y/%m/%d"),
        gen_time=parsed.generated_at.strftime("%H:%M:%S.%f"),
        log_date=parsed.logged_at.strftime("%Y/%m/%d"),
        log_time=parsed.logged_at.strftime("%H:%M:%S.%f"),
        altitude=str(parsed.altitude),
        ground_speed=repr(parsed.ground_speed),
        track=repr(parsed.track),
        lat=repr(parsed.latitude),
        lon=repr(parsed.longitude),
        on_ground="1" if parsed.on_ground else "0",
    )

    assert parse_sbs_message("radar1:30003", rebuilt) == parsed
