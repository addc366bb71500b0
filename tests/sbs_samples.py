"""Builders for SBS-1 records and messages shared by the tests."""

from datetime import datetime, timezone

from waxmoth.domain import MessageType
from waxmoth.ingestors.sbs1 import Message

ICAO = 0x4CA2B4


def epoch_ns(*args: int) -> int:
    moment = datetime(*args, tzinfo=timezone.utc)
    return int(moment.timestamp()) * 1_000_000_000


BASE_NS = epoch_ns(2023, 1, 1, 12, 0, 0)


def make_record(
    msg_type: str = "MSG",
    subtype: str = "3",
    icao: str = "4CA2B4",
    gen_date: str = "2023/01/01",
    gen_time: str = "12:00:00.000",
    log_date: str = "2023/01/01",
    log_time: str = "12:00:00.100",
    call_sign: str = "",
    altitude: str = "",
    ground_speed: str = "",
    track: str = "",
    lat: str = "",
    lon: str = "",
    vertical: str = "",
    squawk: str = "",
    alert: str = "0",
    emergency: str = "0",
    spi: str = "0",
    on_ground: str = "0",
) -> str:
    return ",".join(
        [
            msg_type,
            subtype,
            "1",
            "1",
            icao,
            "1",
            gen_date,
            gen_time,
            log_date,
            log_time,
            call_sign,
            altitude,
            ground_speed,
            track,
            lat,
            lon,
            vertical,
            squawk,
            alert,
            emergency,
            spi,
            on_ground,
        ]
    )


def make_message(
    station: str = "alpha:30003",
    subtype: int | None = 3,
    *,
    icao: int = ICAO,
    generated_ns: int = BASE_NS,
    logged_ns: int | None = None,
    msg_type: MessageType = MessageType.TRANSMISSION,
    **fields,
) -> Message:
    return Message(
        station=station,
        type=msg_type,
        icao=icao,
        generated_ns=generated_ns,
        logged_ns=generated_ns if logged_ns is None else logged_ns,
        subtype=subtype,
        **fields,
    )
