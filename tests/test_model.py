import pytest

from vbcounter.decoder import bcd_encode
from vbcounter.model import TopModel


def _tick(model: TopModel) -> None:
    model.clk = 0
    model.eval()
    model.clk = 1
    model.eval()


def _reset(model: TopModel) -> None:
    model.rst = 1
    _tick(model)
    model.rst = 0


def test_default_name():
    assert TopModel().name == "TOP"


def test_custom_name():
    assert TopModel("dut").name == "dut"


def test_initial_eval_settles_output():
    model = TopModel()
    model.eval()
    assert model.count == 0
    assert model.bcd == 0


def test_reset_clears_counter():
    model = TopModel()
    model.en = 1
    for _ in range(5):
        _tick(model)
    assert model.count == 5
    _reset(model)
    assert model.count == 0
    assert model.bcd == 0


def test_counts_only_when_enabled():
    model = TopModel()
    _reset(model)
    model.en = 0
    for _ in range(3):
        _tick(model)
    assert model.count == 0
    model.en = 1
    for _ in range(3):
        _tick(model)
    assert model.count == 3


def test_counts_only_on_rising_edge():
    model = TopModel()
    model.clk = 1
    model.eval()
    model.en = 1
    model.eval()
    model.eval()
    assert model.count == 0
    model.clk = 0
    model.eval()
    assert model.count == 0
    model.clk = 1
    model.eval()
    assert model.count == 1


def test_first_eval_with_high_clock_is_not_an_edge():
    model = TopModel()
    model.clk = 1
    model.en = 1
    model.eval()
    assert model.count == 0


def test_bcd_of_123():
    model = TopModel()
    _reset(model)
    model.en = 1
    for _ in range(123):
        _tick(model)
    assert model.count == 123
    assert model.bcd == 0x123


def test_counter_wraps_at_256():
    model = TopModel()
    _reset(model)
    model.en = 1
    for _ in range(256):
        _tick(model)
    assert model.count == 0
    assert model.bcd == 0


def test_bcd_tracks_count_every_cycle():
    model = TopModel()
    _reset(model)
    model.en = 1
    for _ in range(300):
        _tick(model)
        assert model.bcd == bcd_encode(model.count)
        assert model.decoder_result == model.bcd << 8


def test_eval_marks_activity():
    model = TopModel()
    model.activity = False
    model.eval()
    assert model.activity is True


def test_final_marks_finished():
    model = TopModel()
    model.final()
    assert model.finished is True


@pytest.mark.parametrize("port", ["clk", "rst", "en"])
def test_overwidth_single_bit_input(port):
    model = TopModel()
    setattr(model, port, 2)
    with pytest.raises(ValueError):
        model.eval()


def test_overwidth_v_input():
    model = TopModel()
    model.v = 256
    with pytest.raises(ValueError):
        model.eval()


def test_non_int_input_rejected():
    model = TopModel()
    model.en = "1"
    with pytest.raises(TypeError):
        model.eval()


def test_bool_inputs_accepted():
    model = TopModel()
    _reset(model)
    model.en = True
    _tick(model)
    assert model.count == 1