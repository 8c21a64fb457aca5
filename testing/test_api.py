"""HTTP endpoints against a recording printer."""

import threading

import pytest
from fastapi.testclient import TestClient

import paperpress.hardware as hardware
from paperpress.errors import LocationNotFound, OutputFinishFailure, UpstreamUnavailable
from paperpress.main import app
from paperpress.modules import weather
from paperpress.modules.forecast import ForecastData


class RecordingPrinter:
    name = "console"
    is_device = False

    def __init__(self, fail_finish=False):
        self.ops = []
        self.fail_finish = fail_finish

    def begin(self):
        self.ops.append(("begin",))

    def write_chunk(self, text):
        self.ops.append(("write", text))

    def finish(self):
        if self.fail_finish:
            raise OutputFinishFailure("Printer cut failed")
        self.ops.append(("finish",))

    def close(self):
        pass

    def written(self):
        return "".join(op[1] for op in self.ops if op[0] == "write")


@pytest.fixture
def printer(monkeypatch):
    recorder = RecordingPrinter()
    monkeypatch.setattr(hardware, "printer", recorder)
    return recorder


@pytest.fixture
def client():
    return TestClient(app)


def _sample_forecast(location):
    return ForecastData(
        location=location.name,
        date="2024-06-01",
        temperature_max=78.0,
        temperature_min=61.0,
        weather_code=0,
        sunrise="2024-06-01T05:25",
        sunset="2024-06-01T20:22",
    )


def test_print_wraps_text(client, printer):
    resp = client.post("/", content="hello   world".encode())

    assert resp.status_code == 200
    assert resp.content == b""
    assert printer.ops == [
        ("begin",),
        ("write", "hello"),
        ("write", " "),
        ("write", "world"),
        ("write", "\n"),
        ("finish",),
    ]


def test_print_raw_keeps_spacing(client, printer):
    resp = client.post("/", params={"raw": "true"}, content=b"  a   b\n")

    assert resp.status_code == 200
    assert printer.ops == [("begin",), ("write", "  a   b"), ("write", "\n"), ("finish",)]


def test_print_empty_body_is_one_blank_line(client, printer):
    resp = client.post("/", content=b"")

    assert resp.status_code == 200
    assert printer.ops == [("begin",), ("write", "\n"), ("finish",)]


def test_print_rejects_non_utf8_body(client, printer):
    resp = client.post("/", content=b"\xff\xfe\xfa")

    assert resp.status_code == 422
    assert printer.ops == []


def test_print_rejects_oversized_word_without_printing(client, printer):
    resp = client.post("/", content=("ok " + "x" * 49).encode())

    assert resp.status_code == 422
    assert printer.ops == []


def test_print_cut_failure_is_server_error(client, monkeypatch):
    monkeypatch.setattr(hardware, "printer", RecordingPrinter(fail_finish=True))

    resp = client.post("/", content=b"hello")

    assert resp.status_code == 500
    assert not hardware.printer_lock.locked()


def test_weather_prints_forecast(client, printer, monkeypatch):
    monkeypatch.setattr(
        weather, "geocode", lambda name: weather.Location(f"{name}, France", 48.85, 2.35)
    )
    monkeypatch.setattr(weather, "fetch_forecast", _sample_forecast)

    resp = client.get("/weather", params={"location": "Paris"})

    assert resp.status_code == 200
    assert printer.ops[0] == ("begin",)
    assert printer.ops[-1] == ("finish",)
    text = printer.written()
    assert "PARIS, FRANCE" in text
    assert "Conditions: Clear sky" in text
    assert "Sunrise 05:25" in text


def test_weather_defaults_location(client, printer, monkeypatch):
    looked_up = []

    def fake_geocode(name):
        looked_up.append(name)
        return weather.Location(name, 40.71, -74.01)

    monkeypatch.setattr(weather, "geocode", fake_geocode)
    monkeypatch.setattr(weather, "fetch_forecast", _sample_forecast)
    monkeypatch.setattr(weather.settings, "default_location", "New York")

    resp = client.get("/weather")

    assert resp.status_code == 200
    assert looked_up == ["New York"]


def test_weather_unknown_location_is_not_found(client, printer, monkeypatch):
    def fake_geocode(name):
        raise LocationNotFound(f"No location matches '{name}'")

    monkeypatch.setattr(weather, "geocode", fake_geocode)

    resp = client.get("/weather", params={"location": "Nowhereville"})

    assert resp.status_code == 404
    assert printer.ops == []


def test_weather_upstream_failure_is_bad_gateway(client, printer, monkeypatch):
    def fake_fetch(location):
        raise UpstreamUnavailable("Weather service unavailable")

    monkeypatch.setattr(
        weather, "geocode", lambda name: weather.Location(name, 48.85, 2.35)
    )
    monkeypatch.setattr(weather, "fetch_forecast", fake_fetch)

    resp = client.get("/weather", params={"location": "Paris"})

    assert resp.status_code == 502
    assert printer.ops == []


def test_status_reports_printer(client, printer):
    resp = client.get("/status")

    assert resp.status_code == 200
    assert resp.json() == {"printer": "console", "width": 48}


def test_weather_lookup_runs_outside_printer_lock(client, printer, monkeypatch):
    lock_held = []

    def fake_geocode(name):
        lock_held.append(hardware.printer_lock.locked())
        return weather.Location(name, 48.85, 2.35)

    def fake_fetch(location):
        lock_held.append(hardware.printer_lock.locked())
        return _sample_forecast(location)

    monkeypatch.setattr(weather, "geocode", fake_geocode)
    monkeypatch.setattr(weather, "fetch_forecast", fake_fetch)

    resp = client.get("/weather", params={"location": "Paris"})

    assert resp.status_code == 200
    assert lock_held == [False, False]


def test_print_is_not_blocked_by_a_hung_weather_fetch(client, printer, monkeypatch):
    fetch_started = threading.Event()
    release_fetch = threading.Event()

    def slow_fetch(location):
        fetch_started.set()
        release_fetch.wait(timeout=5)
        return _sample_forecast(location)

    monkeypatch.setattr(
        weather, "geocode", lambda name: weather.Location(name, 48.85, 2.35)
    )
    monkeypatch.setattr(weather, "fetch_forecast", slow_fetch)

    results = {}

    def get_weather():
        results["weather"] = client.get("/weather", params={"location": "Paris"})

    worker = threading.Thread(target=get_weather)
    worker.start()
    try:
        assert fetch_started.wait(timeout=5)

        resp = client.post("/", content=b"while waiting")

        assert resp.status_code == 200
        assert not release_fetch.is_set()
        assert printer.written() == "while waiting\n"
    finally:
        release_fetch.set()
        worker.join(timeout=5)

    assert results["weather"].status_code == 200
    assert printer.written().startswith("while waiting\n")
