import threading

import pytest

from poker.errors import RoundErrorKind, RoundException
from poker.model import ActType, Phase


def open_round(engine, *stacks):
    return engine.create_round([(i + 1, s) for i, s in enumerate(stacks)])


class TestCreateRound:
    def test_seats_players_in_order(self, engine):
        rnd = open_round(engine, 100, 200, 300)
        assert rnd.id is not None
        assert [p.id for p in rnd.players] == [1, 2, 3]
        assert [p.stack for p in rnd.players] == [100, 200, 300]
        assert rnd.phase == Phase.PRE_FLOP
        assert rnd.min_raise == 2

    def test_custom_min_raise(self, engine):
        rnd = engine.create_round([(1, 100), (2, 100)], min_raise=10)
        assert rnd.min_raise == 10

    @pytest.mark.parametrize("players,min_raise", [
        ([(1, 100)], None),
        ([(1, 100), (1, 100)], None),
        ([(1, 100), (2, 0)], None),
        ([(1, 100), (2, 100)], 0),
    ])
    def test_rejects_bad_rounds(self, engine, players, min_raise):
        with pytest.raises(RoundException) as e:
            engine.create_round(players, min_raise=min_raise)
        assert e.value.kind == RoundErrorKind.INVALID_ROUND

    def test_ids_are_distinct(self, engine):
        assert open_round(engine, 100, 100).id != open_round(engine, 100, 100).id


class TestSaveAct:
    def test_missing_round(self, engine):
        with pytest.raises(RoundException) as e:
            engine.save_act(404, 1, ActType.CHECK)
        assert e.value.kind == RoundErrorKind.ROUND_NOT_FOUND
        with pytest.raises(RoundException) as e:
            engine.get_possible_acts(404, 1)
        assert e.value.kind == RoundErrorKind.ROUND_NOT_FOUND

    def test_scenario_raise_and_call(self, engine):
        rnd = open_round(engine, 100, 100)

        after = engine.save_act(rnd.id, 1, ActType.RAISE, Phase.PRE_FLOP, 20)
        assert after.highest_bet == 20
        assert after.pot == 20
        assert engine.get_possible_acts(rnd.id, 2) == [
            ActType.FOLD, ActType.CALL, ActType.RAISE, ActType.ALL_IN,
        ]

        after = engine.save_act(rnd.id, 2, ActType.CALL, Phase.PRE_FLOP)
        assert after.pot == 40
        assert after.phase == Phase.FLOP
        assert engine.get_round(rnd.id).pot == 40
        assert [a.type for a in engine.get_acts(rnd.id)] == [ActType.RAISE, ActType.CALL]

    def test_out_of_turn_leaves_state_unchanged(self, engine):
        rnd = open_round(engine, 100, 100)
        engine.save_act(rnd.id, 1, ActType.RAISE, bet=20)
        before = engine.get_round(rnd.id)

        with pytest.raises(RoundException) as e:
            engine.save_act(rnd.id, 1, ActType.RAISE, bet=20)
        assert e.value.kind == RoundErrorKind.NOT_PLAYERS_TURN

        after = engine.get_round(rnd.id)
        assert after.pot == before.pot == 20
        assert after.highest_bet == 20
        assert after.version == before.version
        assert [p.bet for p in after.players] == [20, 0]

    def test_invalid_act_leaves_state_unchanged(self, engine):
        rnd = open_round(engine, 100, 100)
        engine.save_act(rnd.id, 1, ActType.RAISE, bet=20)

        with pytest.raises(RoundException) as e:
            engine.save_act(rnd.id, 2, ActType.CHECK)
        assert e.value.kind == RoundErrorKind.INVALID_ACT

        with pytest.raises(RoundException) as e:
            engine.save_act(rnd.id, 2, ActType.RAISE, bet=21)
        assert e.value.kind == RoundErrorKind.INVALID_AMOUNT

        assert engine.get_round(rnd.id).version == 1
        assert engine.get_round(rnd.id).to_act_player.id == 2

    def test_closed_round_rejects_acts(self, engine):
        rnd = open_round(engine, 100, 100)
        engine.save_act(rnd.id, 1, ActType.FOLD)
        assert engine.get_round(rnd.id).winner_id == 2

        with pytest.raises(RoundException) as e:
            engine.save_act(rnd.id, 2, ActType.CHECK)
        assert e.value.kind == RoundErrorKind.ROUND_CLOSED

    def test_returned_round_is_detached_from_store(self, engine):
        rnd = open_round(engine, 100, 100)
        after = engine.save_act(rnd.id, 1, ActType.RAISE, bet=20)
        after.pot = 9999
        after.players[0].stack = 0
        stored = engine.get_round(rnd.id)
        assert stored.pot == 20
        assert stored.players[0].stack == 80

    def test_concurrent_submissions_apply_once(self, engine):
        rnd = open_round(engine, 100, 100)
        start = threading.Barrier(8)
        results = []

        def submit():
            start.wait()
            try:
                engine.save_act(rnd.id, 1, ActType.RAISE, bet=20)
                results.append("ok")
            except RoundException as e:
                results.append(e.kind)

        threads = [threading.Thread(target=submit) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count("ok") == 1
        assert results.count(RoundErrorKind.NOT_PLAYERS_TURN) == 7
        stored = engine.get_round(rnd.id)
        assert stored.pot == 20
        assert len(stored.acts) == 1


class TestRoundLocks:
    def test_missing_rounds_leave_no_locks(self, engine):
        for round_id in range(1000, 1500):
            with pytest.raises(RoundException):
                engine.save_act(round_id, 1, ActType.CHECK)
        assert engine._locks == {}

    def test_closed_rounds_leave_no_locks(self, engine):
        rnd = open_round(engine, 100, 100)
        engine.save_act(rnd.id, 1, ActType.FOLD)
        assert engine._locks == {}

        for _ in range(50):
            with pytest.raises(RoundException) as e:
                engine.save_act(rnd.id, 2, ActType.CHECK)
            assert e.value.kind == RoundErrorKind.ROUND_CLOSED
        assert engine._locks == {}

    def test_rejected_acts_release_their_lock(self, engine):
        rnd = open_round(engine, 100, 100)
        with pytest.raises(RoundException):
            engine.save_act(rnd.id, 2, ActType.CHECK)
        with pytest.raises(RoundException):
            engine.save_act(rnd.id, 1, ActType.RAISE, bet=1000)
        assert engine._locks == {}

    def test_registry_empty_after_concurrent_play(self, engine):
        rnd = open_round(engine, 100, 100)
        start = threading.Barrier(6)

        def submit():
            start.wait()
            try:
                engine.save_act(rnd.id, 1, ActType.CHECK)
            except RoundException:
                pass

        threads = [threading.Thread(target=submit) for _ in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert engine._locks == {}
        assert len(engine.get_round(rnd.id).acts) == 1
