import pytest

from vbcounter.decoder import bcd_digits, bcd_encode
from vbcounter.model import TopModel
from vbcounter.testbench import main, run
from vbcounter.vcd import VcdWriter


class StubVbuddy:
    def __init__(self, flag=True):
        self.calls = []
        self._flag = flag

    def set_mode(self, mode):
        self.calls.append(("set_mode", mode))

    def hex(self, digit, value):
        self.calls.append(("hex", digit, value))

    def cycle(self, count):
        self.calls.append(("cycle", count))

    def flag(self):
        return self._flag


class StubVcd:
    def __init__(self):
        self.times = []

    def dump(self, time):
        self.times.append(time)


def test_run_dumps_every_half_cycle():
    vcd = StubVcd()
    ran = run(TopModel(), StubVbuddy(), vcd, 5)
    assert ran == 5
    assert vcd.times == list(range(10))


def test_run_sets_one_shot_mode_first():
    vb = StubVbuddy()
    run(TopModel(), vb, StubVcd(), 3)
    assert vb.calls[0] == ("set_mode", 1)


def test_run_reports_cycles_in_order():
    vb = StubVbuddy()
    run(TopModel(), vb, StubVcd(), 6)
    cycles = [c[1] for c in vb.calls if c[0] == "cycle"]
    assert cycles == [1, 2, 3, 4, 5, 6]


def test_run_shows_current_bcd_digits():
    model = TopModel()
    vb = StubVbuddy(flag=True)
    run(model, vb, StubVcd(), 20)
    hexes = [c for c in vb.calls if c[0] == "hex"]
    assert hexes[-4:] == [
        ("hex", 4, 0),
        ("hex", 3, bcd_digits(model.bcd)[0]),
        ("hex", 2, bcd_digits(model.bcd)[1]),
        ("hex", 1, bcd_digits(model.bcd)[2]),
    ]
    assert model.bcd == bcd_encode(model.count)


def test_run_counts_when_enabled():
    model = TopModel()
    run(model, StubVbuddy(flag=True), StubVcd(), 10)
    assert model.count == 7


def test_run_holds_when_disabled():
    model = TopModel()
    vb = StubVbuddy(flag=False)
    run(model, vb, StubVcd(), 12)
    assert model.count == 0
    assert all(c[2] == 0 for c in vb.calls if c[0] == "hex")


def test_run_stops_when_model_finished():
    model = TopModel()
    model.final()
    vcd = StubVcd()
    assert run(model, StubVbuddy(), vcd, 50) == 1
    assert vcd.times == [0, 1]


def test_run_with_real_trace(tmp_path):
    model = TopModel()
    path = tmp_path / "counter.vcd"
    with VcdWriter(model) as vcd:
        vcd.open(path)
        run(model, StubVbuddy(), vcd, 4)
    text = path.read_text()
    assert "$enddefinitions $end" in text
    assert "#7" in text


def test_main_fails_without_config(tmp_path, capsys):
    vcd_path = tmp_path / "counter.vcd"
    code = main(["--config", str(tmp_path / "missing.cfg"), "--vcd", str(vcd_path)])
    assert code == -1
    assert "$enddefinitions $end" in vcd_path.read_text()
    assert "Cannot connect to Vbuddy" in capsys.readouterr().out


def test_main_fails_on_unopenable_port(tmp_path):
    cfg = tmp_path / "vbuddy.cfg"
    cfg.write_text(str(tmp_path / "no-such-port") + "\n")
    code = main(["--config", str(cfg), "--vcd", str(tmp_path / "out.vcd")])
    assert code == -1


def test_main_rejects_bad_cycles():
    with pytest.raises(SystemExit):
        main(["--cycles", "many"])