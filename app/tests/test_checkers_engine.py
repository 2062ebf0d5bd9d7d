# app/tests/test_checkers_engine.py

import pytest
from services.games.checkers_engine import CheckersEngine
from services.rules_engine_interface import GameResult, MoveError, MoveApplication
from models.piece import Side
from test_helpers import arrange_checkers, checkers_move, WHITE, BLACK


@pytest.mark.unit
class TestCheckersInitialization:
    """Tests for CheckersEngine construction and starting position"""

    def test_initialization_standard(self, checkers_engine, white_player, black_player):
        """Test standard 8x8 checkers initialization"""
        assert checkers_engine.board_size == 8
        assert checkers_engine.forced_capture is False
        assert checkers_engine.backward_capture is False
        assert checkers_engine.non_capture_draw_limit == 0
        assert checkers_engine.player_sides == {"user:1": Side.WHITE, "user:2": Side.BLACK}
        assert checkers_engine.pending_piece is None

    def test_hands_hold_own_side(self, checkers_engine, white_player, black_player):
        """Test each player starts holding exactly their side's pieces"""
        assert len(white_player.hand) == 12
        assert len(black_player.hand) == 12
        assert all(piece.side == Side.WHITE for piece in white_player.hand)
        assert all(piece.side == Side.BLACK for piece in black_player.hand)
        assert white_player.spoils == [] and black_player.spoils == []

    def test_initialization_custom_board_size(self, players):
        engine = CheckersEngine(players, rules={"board_size": 10})

        assert engine.board_size == 10
        assert engine.board.count(Side.WHITE) == 15

    def test_initialization_invalid_player_count(self, players):
        """Test that initialization fails with wrong number of players"""
        from models.player import Player
        with pytest.raises(ValueError, match="exactly 2 players"):
            CheckersEngine(players + [Player("user:3")])

    def test_odd_board_size_rejected(self, players):
        with pytest.raises(ValueError, match="even"):
            CheckersEngine(players, rules={"board_size": 7})

    def test_board_size_out_of_range_rejected(self, players):
        with pytest.raises(ValueError, match="at most 16"):
            CheckersEngine(players, rules={"board_size": 18})

    def test_board_size_without_gap_rejected(self, players):
        with pytest.raises(ValueError, match="at least 8"):
            CheckersEngine(players, rules={"board_size": 6})

    def test_smallest_board_size_playable(self, players):
        engine = CheckersEngine(players, rules={"board_size": 8})

        assert engine.legal_moves("user:1")
        assert not engine.game_won("user:2")

    def test_board_size_wrong_type_rejected(self, players):
        with pytest.raises(ValueError, match="must be an integer"):
            CheckersEngine(players, rules={"board_size": "8"})

    def test_unknown_rule_value_rejected(self, players):
        with pytest.raises(ValueError, match="not in allowed values"):
            CheckersEngine(players, rules={"forced_capture": "Maybe"})

    def test_game_info(self):
        """Test static checkers game information"""
        info = CheckersEngine.get_game_info()

        assert info.game_name == "checkers"
        assert info.min_players == 2 and info.max_players == 2
        assert set(info.supported_rules) == {
            "board_size", "forced_capture", "backward_capture", "non_capture_draw_limit"
        }
        assert info.supported_rules["forced_capture"].default == "No"


@pytest.mark.unit
class TestCheckersLegalDestinations:
    """Tests for legal destination queries"""

    def test_out_of_bounds(self, checkers_engine):
        for x, y in [(0, 1), (1, 0), (9, 1), (1, 9), (-3, 4)]:
            query = checkers_engine.legal_destinations(x, y)
            assert not query.valid
            assert query.error_code == MoveError.OUT_OF_BOUNDS

    def test_bounds_follow_board_size(self, players):
        """Test a 10x10 board accepts rows 9 and 10"""
        engine = CheckersEngine(players, rules={"board_size": 10})

        assert engine.legal_destinations(9, 9).valid
        assert engine.legal_destinations(11, 1).error_code == MoveError.OUT_OF_BOUNDS

    def test_no_piece_at_square(self, checkers_engine):
        query = checkers_engine.legal_destinations(4, 4)

        assert not query.valid
        assert query.error_code == MoveError.NO_PIECE_AT_SQUARE
        assert query.destinations == set()

    def test_opening_destinations(self, checkers_engine):
        """Test front-row pieces can step forward and back-row pieces are blocked"""
        assert checkers_engine.legal_destinations(3, 3).destinations == {(2, 4), (4, 4)}
        assert checkers_engine.legal_destinations(7, 3).destinations == {(6, 4), (8, 4)}
        assert checkers_engine.legal_destinations(2, 6).destinations == {(1, 5), (3, 5)}

        blocked = checkers_engine.legal_destinations(1, 1)
        assert blocked.valid
        assert blocked.destinations == set()

    def test_simple_move_destinations(self, checkers_engine):
        """Test a lone white piece moves diagonally forward only"""
        arrange_checkers(checkers_engine, [(WHITE, 3, 5), (BLACK, 8, 8)])

        assert checkers_engine.legal_destinations(3, 5).destinations == {(2, 6), (4, 6)}

    def test_black_moves_down(self, checkers_engine):
        arrange_checkers(checkers_engine, [(WHITE, 1, 1), (BLACK, 4, 4)])

        assert checkers_engine.legal_destinations(4, 4).destinations == {(3, 3), (5, 3)}

    def test_capture_destination(self, checkers_engine):
        """Test an adjacent opposing piece with an empty landing gives a jump"""
        arrange_checkers(checkers_engine, [(WHITE, 3, 5), (BLACK, 4, 6), (BLACK, 8, 8)])

        assert checkers_engine.legal_destinations(3, 5).destinations == {(2, 6), (5, 7)}

    def test_capture_blocked_by_occupied_landing(self, checkers_engine):
        arrange_checkers(checkers_engine, [(WHITE, 3, 5), (BLACK, 4, 6), (BLACK, 5, 7)])

        assert checkers_engine.legal_destinations(3, 5).destinations == {(2, 6)}

    def test_capture_blocked_by_board_edge(self, checkers_engine):
        arrange_checkers(checkers_engine, [(WHITE, 7, 5), (BLACK, 8, 6), (BLACK, 1, 8)])

        assert checkers_engine.legal_destinations(7, 5).destinations == {(6, 6)}

    def test_own_piece_not_jumped(self, checkers_engine):
        arrange_checkers(checkers_engine, [(WHITE, 3, 5), (WHITE, 4, 6), (BLACK, 8, 8)])

        assert checkers_engine.legal_destinations(3, 5).destinations == {(2, 6)}

    def test_promoted_piece_moves_in_all_directions(self, checkers_engine):
        arrange_checkers(checkers_engine, [(WHITE, 4, 4, True), (BLACK, 8, 8)])

        assert checkers_engine.legal_destinations(4, 4).destinations == {(3, 3), (5, 3), (3, 5), (5, 5)}

    def test_regular_piece_cannot_capture_backward_by_default(self, checkers_engine):
        arrange_checkers(checkers_engine, [(WHITE, 3, 5), (BLACK, 2, 4), (BLACK, 8, 8)])

        assert (1, 3) not in checkers_engine.legal_destinations(3, 5).destinations

    def test_repeated_queries_identical(self, checkers_engine):
        """Test querying does not change the answer"""
        first = checkers_engine.legal_destinations(5, 3).destinations
        second = checkers_engine.legal_destinations(5, 3).destinations

        assert first == second == {(4, 4), (6, 4)}

    def test_legal_moves_at_start(self, checkers_engine):
        """Test each side has seven opening moves"""
        white_moves = checkers_engine.legal_moves("user:1")
        black_moves = checkers_engine.legal_moves("user:2")

        assert len(white_moves) == 7
        assert len(black_moves) == 7
        assert {"from_x": 3, "from_y": 3, "to_x": 4, "to_y": 4} in white_moves
        assert all(move["from_y"] == 6 for move in black_moves)


@pytest.mark.unit
class TestCheckersOptionalRules:
    """Tests for forced_capture and backward_capture"""

    def test_forced_capture_restricts_side(self, players):
        """Test a side with a capture available may only capture"""
        engine = CheckersEngine(players, rules={"forced_capture": "Yes"})
        arrange_checkers(engine, [(WHITE, 3, 5), (BLACK, 4, 6), (WHITE, 7, 1), (BLACK, 8, 8)])

        assert engine.legal_destinations(3, 5).destinations == {(5, 7)}
        assert engine.legal_destinations(7, 1).destinations == set()

        result = engine.validate_move("user:1", checkers_move((7, 1), (8, 2)))
        assert result.error_code == MoveError.ILLEGAL_MOVE

    def test_capture_optional_by_default(self, checkers_engine):
        arrange_checkers(checkers_engine, [(WHITE, 3, 5), (BLACK, 4, 6), (WHITE, 7, 1), (BLACK, 8, 8)])

        assert checkers_engine.legal_destinations(7, 1).destinations == {(6, 2), (8, 2)}
        assert checkers_engine.validate_move("user:1", checkers_move((7, 1), (8, 2))).valid

    def test_forced_capture_does_not_restrict_other_side(self, players):
        engine = CheckersEngine(players, rules={"forced_capture": "Yes"})
        arrange_checkers(engine, [(WHITE, 3, 5), (WHITE, 2, 4), (BLACK, 4, 6), (BLACK, 8, 8)])

        assert engine.legal_destinations(8, 8).destinations == {(7, 7)}

    def test_backward_capture(self, players):
        """Test regular pieces capture backward but still only step forward"""
        engine = CheckersEngine(players, rules={"backward_capture": "Yes"})
        arrange_checkers(engine, [(WHITE, 3, 5), (BLACK, 2, 4), (BLACK, 8, 8)])

        destinations = engine.legal_destinations(3, 5).destinations
        assert (1, 3) in destinations
        assert (4, 4) not in destinations
        assert destinations == {(1, 3), (2, 6), (4, 6)}


@pytest.mark.unit
class TestCheckersMoveValidation:
    """Tests for validate_move error codes"""

    def test_validate_move_valid(self, checkers_engine):
        result = checkers_engine.validate_move("user:1", checkers_move((3, 3), (4, 4)))

        assert result.valid is True
        assert result.error_message is None
        assert result.error_code is None

    def test_missing_field(self, checkers_engine):
        result = checkers_engine.validate_move("user:1", {"from_x": 3, "from_y": 3, "to_x": 4})

        assert result.error_code == MoveError.INVALID_MOVE_DATA
        assert "to_y" in result.error_message

    def test_non_integer_coordinates(self, checkers_engine):
        result = checkers_engine.validate_move("user:1", checkers_move(("a", 3), (4, 4)))
        assert result.error_code == MoveError.INVALID_MOVE_DATA

    def test_origin_out_of_bounds(self, checkers_engine):
        result = checkers_engine.validate_move("user:1", checkers_move((0, 3), (1, 4)))
        assert result.error_code == MoveError.OUT_OF_BOUNDS

    def test_destination_out_of_bounds(self, checkers_engine):
        arrange_checkers(checkers_engine, [(WHITE, 8, 4), (BLACK, 1, 8)])

        result = checkers_engine.validate_move("user:1", checkers_move((8, 4), (9, 5)))
        assert result.error_code == MoveError.OUT_OF_BOUNDS

    def test_no_piece_at_origin(self, checkers_engine):
        result = checkers_engine.validate_move("user:1", checkers_move((4, 4), (5, 5)))
        assert result.error_code == MoveError.NO_PIECE_AT_SQUARE

    def test_not_your_piece(self, checkers_engine):
        result = checkers_engine.validate_move("user:1", checkers_move((2, 6), (1, 5)))
        assert result.error_code == MoveError.NOT_YOUR_PIECE

    def test_illegal_destination(self, checkers_engine):
        result = checkers_engine.validate_move("user:1", checkers_move((3, 3), (3, 4)))
        assert result.error_code == MoveError.ILLEGAL_MOVE

    def test_regular_piece_cannot_move_backward(self, checkers_engine):
        arrange_checkers(checkers_engine, [(WHITE, 3, 5), (BLACK, 8, 8)])

        result = checkers_engine.validate_move("user:1", checkers_move((3, 5), (2, 4)))
        assert result.error_code == MoveError.ILLEGAL_MOVE

    def test_validation_changes_nothing(self, checkers_engine):
        """Test rejected and accepted validations leave the board as it was"""
        before = checkers_engine.board.render()

        checkers_engine.validate_move("user:1", checkers_move((3, 3), (3, 4)))
        checkers_engine.validate_move("user:1", checkers_move((3, 3), (4, 4)))

        assert checkers_engine.board.render() == before


@pytest.mark.unit
class TestCheckersMoveApplication:
    """Tests for applying moves, captures, chains and promotion"""

    def test_simple_move(self, checkers_engine):
        """Test a plain step moves the piece and ends the turn"""
        arrange_checkers(checkers_engine, [(WHITE, 3, 5), (BLACK, 8, 8)])

        application = checkers_engine.apply_move("user:1", checkers_move((3, 5), (4, 6)))

        assert application.turn_ends
        assert application.continuation == []
        assert application.captured == []
        assert checkers_engine.board.is_empty(3, 5)
        assert checkers_engine.board.piece_at(4, 6).side == Side.WHITE

    def test_single_capture(self, checkers_engine, white_player, black_player):
        """Test a jump removes the jumped piece and hands it to the capturer"""
        pieces = arrange_checkers(checkers_engine, [(WHITE, 3, 5), (BLACK, 4, 6), (BLACK, 8, 8)])
        victim = pieces[1]

        application = checkers_engine.apply_move("user:1", checkers_move((3, 5), (5, 7)))

        assert application.captured == [victim]
        assert application.turn_ends
        assert checkers_engine.board.is_empty(4, 6)
        assert checkers_engine.board.piece_at(5, 7) is pieces[0]
        assert victim in white_player.spoils
        assert not black_player.holds(victim)
        assert len(black_player.hand) == 1

    def test_forced_double_jump(self, checkers_engine):
        """Test a second available jump keeps the same piece moving"""
        pieces = arrange_checkers(checkers_engine, [
            (WHITE, 1, 1), (BLACK, 2, 2), (BLACK, 4, 4), (WHITE, 7, 1), (BLACK, 8, 8),
        ])

        first = checkers_engine.apply_move("user:1", checkers_move((1, 1), (3, 3)))

        assert first.continuation == [(5, 5)]
        assert not first.turn_ends
        assert checkers_engine.pending_piece is pieces[0]

        # Any other piece is refused until the chain resolves
        other = checkers_engine.validate_move("user:1", checkers_move((7, 1), (8, 2)))
        assert other.error_code == MoveError.FORCED_CONTINUATION
        assert checkers_engine.legal_destinations(7, 1).destinations == set()
        assert checkers_engine.legal_destinations(3, 3).destinations == {(5, 5)}
        assert checkers_engine.legal_moves("user:1") == [checkers_move((3, 3), (5, 5))]

        second = checkers_engine.apply_move("user:1", checkers_move((3, 3), (5, 5)))

        assert second.turn_ends
        assert second.captured == [pieces[2]]
        assert checkers_engine.pending_piece is None

    def test_chain_piece_cannot_step(self, checkers_engine):
        """Test the chain piece may only jump on, not make a plain step"""
        arrange_checkers(checkers_engine, [(WHITE, 1, 1), (BLACK, 2, 2), (BLACK, 4, 4), (BLACK, 8, 8)])
        checkers_engine.apply_move("user:1", checkers_move((1, 1), (3, 3)))

        result = checkers_engine.validate_move("user:1", checkers_move((3, 3), (2, 4)))
        assert result.error_code == MoveError.ILLEGAL_MOVE

    def test_no_game_result_while_chain_pending(self, checkers_engine):
        arrange_checkers(checkers_engine, [(WHITE, 1, 1), (BLACK, 2, 2), (BLACK, 4, 4)])
        checkers_engine.apply_move("user:1", checkers_move((1, 1), (3, 3)))

        assert checkers_engine.check_game_result("user:1") == (GameResult.IN_PROGRESS, None)

    def test_promotion(self, checkers_engine):
        """Test reaching the far row promotes and unlocks backward moves"""
        pieces = arrange_checkers(checkers_engine, [(WHITE, 2, 7), (BLACK, 8, 8)])

        application = checkers_engine.apply_move("user:1", checkers_move((2, 7), (3, 8)))

        assert application.promoted is True
        assert pieces[0].promoted is True
        assert checkers_engine.legal_destinations(3, 8).destinations == {(2, 7), (4, 7)}

    def test_black_promotes_on_row_one(self, checkers_engine):
        pieces = arrange_checkers(checkers_engine, [(WHITE, 8, 8), (BLACK, 3, 2)])

        application = checkers_engine.apply_move("user:2", checkers_move((3, 2), (2, 1)))

        assert application.promoted is True
        assert pieces[1].promoted is True

    def test_promoted_piece_is_not_promoted_again(self, checkers_engine):
        arrange_checkers(checkers_engine, [(WHITE, 4, 7, True), (BLACK, 1, 1)])

        application = checkers_engine.apply_move("user:1", checkers_move((4, 7), (5, 8)))

        assert application.promoted is False
        assert checkers_engine.board.piece_at(5, 8).promoted is True

    def test_promotion_mid_chain_continues_as_promoted(self, checkers_engine):
        """Test a piece promoted by a jump may continue capturing backward"""
        pieces = arrange_checkers(checkers_engine, [
            (WHITE, 4, 6), (BLACK, 5, 7), (BLACK, 7, 7), (BLACK, 1, 3),
        ])

        application = checkers_engine.apply_move("user:1", checkers_move((4, 6), (6, 8)))

        assert application.promoted is True
        assert application.captured == [pieces[1]]
        assert application.continuation == [(8, 6)]

    def test_move_piece_returns_application(self, checkers_engine, white_player):
        piece = checkers_engine.board.piece_at(3, 3)

        application = checkers_engine.move_piece(white_player, piece, (4, 4))

        assert isinstance(application, MoveApplication)
        assert piece.position == (4, 4)
        assert checkers_engine.consecutive_non_capture_moves == 1


@pytest.mark.unit
class TestCheckersGameResult:
    """Tests for win and draw detection"""

    def test_in_progress_at_start(self, checkers_engine):
        assert checkers_engine.check_game_result("user:1") == (GameResult.IN_PROGRESS, None)
        assert not checkers_engine.game_won("user:1")
        assert not checkers_engine.game_won("user:2")

    def test_win_by_capturing_last_piece(self, checkers_engine):
        arrange_checkers(checkers_engine, [(WHITE, 3, 5), (BLACK, 4, 6)])

        checkers_engine.apply_move("user:1", checkers_move((3, 5), (5, 7)))

        assert checkers_engine.game_won("user:1")
        assert checkers_engine.check_game_result("user:1") == (GameResult.PLAYER_WIN, "user:1")
        assert checkers_engine.is_terminal("user:1")

    def test_win_by_immobilization(self, checkers_engine):
        """Test a side whose pieces all have no destinations has lost"""
        arrange_checkers(checkers_engine, [(BLACK, 1, 8), (WHITE, 2, 7), (WHITE, 3, 6)])

        assert checkers_engine.legal_destinations(1, 8).destinations == set()
        assert checkers_engine.game_won("user:1")
        assert not checkers_engine.game_won("user:2")

    def test_draw_by_non_capture_limit(self, players):
        engine = CheckersEngine(players, rules={"non_capture_draw_limit": 2})
        arrange_checkers(engine, [(WHITE, 1, 1), (BLACK, 8, 8)])

        engine.apply_move("user:1", checkers_move((1, 1), (2, 2)))
        assert engine.check_game_result("user:1") == (GameResult.IN_PROGRESS, None)

        engine.apply_move("user:2", checkers_move((8, 8), (7, 7)))
        assert engine.check_game_result("user:2") == (GameResult.DRAW, None)

    def test_capture_resets_non_capture_counter(self, players):
        engine = CheckersEngine(players, rules={"non_capture_draw_limit": 2})
        arrange_checkers(engine, [(WHITE, 7, 1), (BLACK, 8, 8), (BLACK, 3, 5), (WHITE, 2, 4)])

        engine.apply_move("user:1", checkers_move((7, 1), (8, 2)))
        engine.apply_move("user:2", checkers_move((3, 5), (1, 3)))

        assert engine.consecutive_non_capture_moves == 0
        assert engine.check_game_result("user:2") == (GameResult.IN_PROGRESS, None)


@pytest.mark.unit
class TestCheckersState:
    """Tests for plain-data views of the engine"""

    def test_board_snapshot(self, checkers_engine):
        snapshot = checkers_engine.board_snapshot()

        assert snapshot.width == 8 and snapshot.height == 8
        assert len(snapshot.pieces) == 24
        assert snapshot.pieces[0].id == 1
        assert snapshot.pieces[0].side == "white"

    def test_engine_state(self, checkers_engine):
        state = checkers_engine.engine_state()

        assert state["player_sides"] == {"user:1": "white", "user:2": "black"}
        assert state["pending_piece"] is None
        assert state["consecutive_non_capture_moves"] == 0
        assert state["rules"] == {}

    def test_engine_state_renders_board(self, checkers_engine):
        arrange_checkers(checkers_engine, [(WHITE, 1, 1), (BLACK, 2, 2, True)])

        rendered = checkers_engine.engine_state()["rendered"]

        assert rendered == checkers_engine.board.render()
        assert rendered.splitlines()[:2] == ["w.......", ".B......"]
