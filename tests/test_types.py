import pytest

from betaentropy.game.types import PASS, Color, Pass, Placement, Role, Slide


def test_role_other():
    assert Role.MOVER.other is Role.PLACER
    assert Role.PLACER.other is Role.MOVER


def test_role_str():
    assert str(Role.MOVER) == "Mover"
    assert str(Role.PLACER) == "Placer"


def test_color_symbols_are_unique_letters():
    symbols = [c.symbol for c in Color]
    assert len(symbols) == 7
    assert len(set(symbols)) == 7
    assert all(len(s) == 1 and s.isupper() for s in symbols)


def test_color_from_symbol_is_case_insensitive():
    assert Color.from_symbol("r") is Color.RED
    assert Color.from_symbol(" C ") is Color.CYAN
    with pytest.raises(ValueError):
        Color.from_symbol("X")


def test_color_str():
    assert str(Color.PURPLE) == "Purple"


def test_pass_is_a_singleton():
    assert Pass() is PASS
    assert repr(PASS) == "PASS"
    assert not isinstance(PASS, Slide)


def test_slide_and_placement_are_value_objects():
    assert Slide(3, 5) == Slide(3, 5)
    assert Slide(3, 5) != Slide(5, 3)
    assert Placement(10, Color.RED) == Placement(10, Color.RED)
    with pytest.raises(AttributeError):
        Slide(3, 5).origin = 4  # frozen
