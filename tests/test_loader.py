"""Unit tests for data.loader."""

from datetime import datetime

import pytest
from signal_bot.core.errors import InvalidBarError
from signal_bot.core.types import Bar
from signal_bot.data.loader import bars_to_frame, check_chronological, load_bars, parse_bars, parse_row


TSV = "\n".join([
    "time\topen\thigh\tlow\tclose\tvolume",
    "2024-01-01 00:00:00\t42000\t42100\t41900\t42050\t12.5",
    "2024-01-01 00:15:00\t42050\t42200\t42000\t42150\t8.0",
    "2024-01-01 00:30:00\t42150\t42150\t41800\t41850\t20",
])


def test_parse_tab_separated():
    bars = parse_bars(TSV)
    assert len(bars) == 3
    assert bars[0].time == datetime(2024, 1, 1, 0, 0)
    assert bars[0].close == 42050.0
    assert bars[2].volume == 20.0


def test_parse_comma_separated_with_quotes():
    text = 'time,open,high,low,close,volume\n"2024-01-01 00:00","1","2","0.5","1.5","10"\n'
    bars = parse_bars(text)
    assert len(bars) == 1
    assert bars[0].high == 2.0


def test_skips_invalid_rows():
    text = "\n".join([
        "time,open,high,low,close,volume",
        "2024-01-01 00:00,100,101,99,100,10",
        "2024-01-01 00:15,100,101,99,0,10",        # close not positive
        "2024-01-01 00:30,100,101,99,100,-5",      # negative volume
        "2024-01-01 00:45,100,101,99",             # short row
        "2024-01-01 01:00,100,abc,99,100,10",      # bad number
        "not a date,100,101,99,100,10",            # bad timestamp
        "2023-12-31 23:00,100,101,99,100,10",      # out of order
        "2024-01-01 00:00,100,101,99,100,10",      # duplicate timestamp
        "",
        "2024-01-01 01:15,100,101,99,101,10",
    ])
    bars = parse_bars(text)
    assert [b.close for b in bars] == [100.0, 101.0]
    assert bars[1].time == datetime(2024, 1, 1, 1, 15)


def test_header_only():
    assert parse_bars("time,open,high,low,close,volume\n") == []


def test_parse_row_errors():
    with pytest.raises(InvalidBarError):
        parse_row("2024-01-01,1,2,3")
    with pytest.raises(InvalidBarError):
        parse_row("2024-01-01,1,2,0.5,nan,3")


def test_load_bars(tmp_path):
    path = tmp_path / "btc.tsv"
    path.write_text(TSV, encoding="utf-8")
    assert len(load_bars(path)) == 3


def test_bars_to_frame():
    df = bars_to_frame(parse_bars(TSV))
    assert list(df.columns) == ["time", "open", "high", "low", "close", "volume"]
    assert len(df) == 3
    assert df["close"].iloc[-1] == 41850.0


def test_check_chronological():
    bars = parse_bars(TSV)
    check_chronological(bars)
    with pytest.raises(InvalidBarError):
        check_chronological([bars[1], bars[0]])
    check_chronological([])
    assert isinstance(bars[0], Bar)


def test_epoch_milliseconds():
    rows = [f"{1700000000000 + i * 900000},100,101,99,100,10" for i in range(5)]
    bars = parse_bars("\n".join(["open_time,open,high,low,close,volume"] + rows))
    assert len(bars) == 5
    assert bars[0].time == datetime(2023, 11, 14, 22, 13, 20)
    assert bars[1].time == datetime(2023, 11, 14, 22, 28, 20)


def test_epoch_seconds():
    rows = [f"{1700000000 + i * 900}\t100\t101\t99\t100\t10" for i in range(5)]
    bars = parse_bars("\n".join(["time\topen\thigh\tlow\tclose\tvolume"] + rows))
    assert len(bars) == 5
    assert bars[0].time == datetime(2023, 11, 14, 22, 13, 20)
    assert bars[4].time == datetime(2023, 11, 14, 23, 13, 20)


def test_mixed_offsets_normalized_to_utc():
    text = "\n".join([
        "time,open,high,low,close,volume",
        "2024-01-01T00:00:00Z,100,101,99,100,10",
        "2024-01-01 00:15,100,101,99,100,10",
        "2024-01-01T02:30:00+02:00,100,101,99,100,10",  # 00:30 UTC
        "2024-01-01T00:20:00Z,100,101,99,100,10",       # out of order
    ])
    bars = parse_bars(text)
    assert [b.time for b in bars] == [
        datetime(2024, 1, 1, 0, 0),
        datetime(2024, 1, 1, 0, 15),
        datetime(2024, 1, 1, 0, 30),
    ]
    assert all(b.time.tzinfo is None for b in bars)
