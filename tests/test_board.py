import random

import pytest

from betaentropy.game.board import (
    CELL_COUNT,
    LINES,
    Board,
    GameState,
    board_from_symbols,
    format_action,
    format_cell,
    game_phase,
    is_game_over,
    lines_touching,
    parse_board,
    parse_cell,
    parse_mover_action,
    parse_state,
)
from betaentropy.game.errors import ErrorCode, InvalidStateError
from betaentropy.game.types import PASS, Color, Phase, Placement, Role, Slide

R, G, B = Color.RED, Color.GREEN, Color.BLUE


def board_with(cells: dict[int, Color]) -> Board:
    return Board(cells.get(i) for i in range(CELL_COUNT))


def random_board(seed: int, filled: int) -> Board:
    rng = random.Random(seed)
    bag = [c for c in Color for _ in range(7)]
    rng.shuffle(bag)
    spots = rng.sample(range(CELL_COUNT), filled)
    return board_with(dict(zip(spots, bag)))


class TestParseCell:
    def test_valid(self):
        assert parse_cell("a1") == 0
        assert parse_cell("c4") == 17  # row 2, column 3
        assert parse_cell("g7") == 48
        assert parse_cell("C4") == 17  # case insensitive

    def test_invalid(self):
        assert parse_cell("") is None
        assert parse_cell("h1") is None
        assert parse_cell("a0") is None
        assert parse_cell("a8") is None
        assert parse_cell("c44") is None
        assert parse_cell("4c") is None


class TestFormat:
    def test_format_cell(self):
        assert format_cell(0) == "a1"
        assert format_cell(17) == "c4"
        assert format_cell(48) == "g7"

    def test_every_cell_round_trips(self):
        assert all(parse_cell(format_cell(i)) == i for i in range(CELL_COUNT))

    def test_format_actions(self):
        assert format_action(Slide(17, 20)) == "c4-c7"
        assert format_action(PASS) == "pass"
        assert format_action(Placement(17, R)) == "c4"

    def test_parse_mover_action(self):
        assert parse_mover_action("c4-c7") == Slide(17, 20)
        assert parse_mover_action(" PASS ") is PASS

    def test_parse_mover_action_rejects_garbage(self):
        with pytest.raises(InvalidStateError) as err:
            parse_mover_action("c4-z9")
        assert err.value.code is ErrorCode.ERR_BAD_ADDRESS


class TestBoard:
    def test_default_board_is_empty(self):
        b = Board()
        assert b.empty_count == CELL_COUNT
        assert b.filled_count == 0
        assert b.key() == "." * CELL_COUNT

    def test_wrong_length_rejected(self):
        with pytest.raises(InvalidStateError) as err:
            Board([None] * 48)
        assert err.value.code is ErrorCode.ERR_BOARD_LENGTH

    def test_empty_sequence_is_not_an_empty_board(self):
        with pytest.raises(InvalidStateError) as err:
            Board([])
        assert err.value.code is ErrorCode.ERR_BOARD_LENGTH
        assert err.value.details == {"length": 0}

    def test_foreign_values_rejected(self):
        with pytest.raises(InvalidStateError) as err:
            Board(["R"] + [None] * 48)
        assert err.value.code is ErrorCode.ERR_UNKNOWN_SYMBOL

    def test_with_cell_is_pure(self):
        b = Board()
        b2 = b.with_cell(5, R)
        assert b.is_empty(5)
        assert b2.get(5) is R
        assert b != b2

    def test_equality_and_hash(self):
        assert board_with({3: R}) == board_with({3: R})
        assert hash(board_with({3: R})) == hash(board_with({3: R}))

    def test_filled_line_drops_empties(self):
        b = board_with({0: R, 3: G, 6: R})
        assert b.line(0) == (R, None, None, G, None, None, R)
        assert b.filled_line(0) == (R, G, R)
        # column 0 holds only the red at the top
        assert b.filled_line(7) == (R,)

    def test_counts(self):
        b = board_with({0: R, 1: R, 2: G})
        assert b.count(R) == 2
        assert b.remaining(R) == 5
        assert b.color_counts() == {R: 2, G: 1}

    def test_rows_text(self):
        text = board_with({0: R, 48: B}).rows_text()
        lines = text.split("\n")
        assert len(lines) == 7
        assert lines[0] == "R......"
        assert lines[6] == "......B"


class TestLines:
    def test_fourteen_lines_of_seven(self):
        assert len(LINES) == 14
        assert all(len(line) == 7 for line in LINES)

    def test_every_cell_in_one_row_and_one_column(self):
        for i in range(CELL_COUNT):
            assert sum(1 for line in LINES if i in line) == 2

    def test_lines_touching(self):
        assert lines_touching([0]) == [0, 7]
        assert lines_touching([0, 3]) == [0, 7, 10]


class TestParseBoard:
    def test_dotted_rows(self):
        text = "R.....G\n" + ".......\n" * 5 + "......B"
        b = parse_board(text)
        assert b.get(0) is R
        assert b.get(6) is G
        assert b.get(48) is B
        assert b.filled_count == 3

    def test_comma_separated_with_empty_strings(self):
        symbols = ["R", "", "G"] + [""] * 46
        b = parse_board(",".join(symbols))
        assert b.get(0) is R
        assert b.is_empty(1)
        assert b.get(2) is G

    def test_symbol_list(self):
        b = board_from_symbols(["y"] + [""] * 48)
        assert b.get(0) is Color.YELLOW

    def test_wrong_length(self):
        with pytest.raises(InvalidStateError) as err:
            parse_board("." * 48)
        assert err.value.code is ErrorCode.ERR_BOARD_LENGTH
        assert err.value.details == {"length": 48}

    def test_unknown_symbol(self):
        with pytest.raises(InvalidStateError) as err:
            parse_board("X" + "." * 48)
        assert err.value.code is ErrorCode.ERR_UNKNOWN_SYMBOL
        assert err.value.details["index"] == 0

    def test_bag_overflow_only_when_strict(self):
        text = "R" * 8 + "." * 41
        assert parse_board(text).count(R) == 8
        with pytest.raises(InvalidStateError) as err:
            parse_board(text, strict=True)
        assert err.value.code is ErrorCode.ERR_BAG_OVERFLOW


class TestParseState:
    def test_valid(self):
        state = parse_state("." * 49, "g", "placer")
        assert state.announced_color is G
        assert state.active_role is Role.PLACER

    def test_missing_color(self):
        with pytest.raises(InvalidStateError) as err:
            parse_state("." * 49, "", "mover")
        assert err.value.code is ErrorCode.ERR_MISSING_COLOR

    def test_unknown_role(self):
        with pytest.raises(InvalidStateError) as err:
            parse_state("." * 49, "R", "chaos")
        assert err.value.code is ErrorCode.ERR_UNKNOWN_ROLE

    def test_error_to_dict(self):
        with pytest.raises(InvalidStateError) as err:
            parse_state("." * 49, "Z", "mover")
        payload = err.value.to_dict()
        assert payload["code"] == "ERR_UNKNOWN_SYMBOL"
        assert payload["details"] == {"symbol": "Z"}


class TestGameState:
    def test_game_over_iff_no_empty_cell(self):
        for seed in range(10):
            for filled in (0, 1, 25, 48, 49):
                b = random_board(seed, filled)
                state = GameState(b, R, Role.MOVER)
                assert state.is_game_over == (b.empty_count == 0)
                assert is_game_over(b) == (b.empty_count == 0)

    def test_phase_thresholds(self):
        assert game_phase(random_board(1, 0)) is Phase.EARLY
        assert game_phase(random_board(1, 15)) is Phase.EARLY
        assert game_phase(random_board(1, 16)) is Phase.MID
        assert game_phase(random_board(1, 34)) is Phase.MID
        assert game_phase(random_board(1, 35)) is Phase.LATE
        assert GameState(random_board(1, 49), R, Role.MOVER).phase is Phase.LATE

    def test_state_is_frozen(self):
        state = GameState(Board(), R, Role.MOVER)
        with pytest.raises(AttributeError):
            state.active_role = Role.PLACER
