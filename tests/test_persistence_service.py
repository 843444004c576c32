import json
import unittest
from dataclasses import replace
from unittest.mock import patch

import pytest

from matchclock.models import ClockState, Possession, PossessionResult, RosterEntry, SubstitutionEvent
from matchclock.models import Running, TimerState
from matchclock.services.clock_service import ClockService
from matchclock.services.persistence_service import MatchStore


class MatchStoreTests(unittest.TestCase):
    def test_insert_resets_version(self) -> None:
        store = MatchStore()
        stored = store.insert_clock(replace(ClockState.scheduled(1), version=5))
        self.assertEqual(stored.version, 0)
        with self.assertRaises(ValueError):
            store.insert_clock(ClockState.scheduled(1))

    def test_compare_and_set_rejects_stale_writes(self) -> None:
        store = MatchStore()
        clock = store.insert_clock(ClockState.scheduled(1))
        running = replace(clock, phase=Running(started_at=100.0, remaining_baseline=600))

        self.assertIsNone(store.compare_and_set_clock(running, 1, TimerState.STOPPED))
        self.assertIsNone(store.compare_and_set_clock(running, 0, TimerState.PAUSED))

        stored = store.compare_and_set_clock(running, 0, TimerState.STOPPED)
        self.assertEqual(stored.version, 1)
        self.assertIs(store.get_clock(1).state, TimerState.RUNNING)
        # The same write again is stale now.
        self.assertIsNone(store.compare_and_set_clock(running, 0, TimerState.STOPPED))

    def test_sequence_ids_are_assigned(self) -> None:
        store = MatchStore()
        first = store.append_substitution(SubstitutionEvent(0, 1, 10, 2, 1, 1, 300))
        second = store.append_substitution(SubstitutionEvent(0, 2, 10, 1, 2, 1, 200))
        self.assertEqual((first.id, second.id), (1, 2))
        self.assertEqual(store.list_substitutions(1), [first])

    def test_update_unknown_possession(self) -> None:
        store = MatchStore()
        with self.assertRaises(KeyError):
            store.update_possession(Possession(id=9, game_id=1, club_id=10, period=1, started_at=0.0))

    def test_roster_is_sorted_by_club_and_player(self) -> None:
        store = MatchStore()
        store.upsert_roster_entry(RosterEntry(1, 20, 3))
        store.upsert_roster_entry(RosterEntry(1, 10, 8, is_starting=True))
        store.upsert_roster_entry(RosterEntry(1, 10, 2))
        store.upsert_roster_entry(RosterEntry(2, 10, 1))
        self.assertEqual([e.player_id for e in store.list_roster(1)], [2, 8, 3])


def test_snapshot_round_trip(tmp_path):
    data_file = str(tmp_path / "nested" / "matches.json")
    store = MatchStore(data_file)
    store.insert_clock(ClockState.scheduled(1))
    store.upsert_roster_entry(RosterEntry(1, 10, 5, is_starting=True, starting_position="attack"))
    store.append_substitution(SubstitutionEvent(0, 1, 10, 6, 5, 2, 300, created_at=12.5))
    possession = store.add_possession(Possession(0, 1, 10, 1, started_at=50.0))
    store.update_possession(possession.close(61.0, PossessionResult.GOAL))

    reloaded = MatchStore(data_file)
    assert reloaded.to_json() == store.to_json()
    assert reloaded.get_roster_entry(1, 5).starting_position == "attack"
    assert reloaded.get_possession(1, possession.id).duration_seconds == 11

    # Ids keep counting after a restart.
    assert reloaded.append_substitution(SubstitutionEvent(0, 1, 10, 5, 6, 3, 300)).id == 2


def test_invalid_snapshot_is_rejected(tmp_path):
    data_file = tmp_path / "matches.json"
    data_file.write_text(json.dumps(["not", "a", "snapshot"]), encoding="utf-8")
    with pytest.raises(ValueError):
        MatchStore(str(data_file))


def test_failed_snapshot_write_leaves_rows_unchanged(tmp_path):
    data_file = tmp_path / "matches.json"
    store = MatchStore(str(data_file))
    service = ClockService(store)
    service.create_clock(1)

    with patch("matchclock.services.persistence_service.json.dump", side_effect=OSError("disk full")):
        with patch("matchclock.services.clock_service.now_ts", return_value=1000.0):
            with pytest.raises(OSError):
                service.start(1)
        with pytest.raises(OSError):
            store.append_substitution(SubstitutionEvent(0, 1, 10, 2, 1, 1, 300))

    clock = store.get_clock(1)
    assert clock.state is TimerState.STOPPED
    assert clock.version == 0
    assert store.list_substitutions(1) == []
    assert not (tmp_path / "matches.json.tmp").exists()

    # The next successful write reuses the id the failed append never took.
    assert store.append_substitution(SubstitutionEvent(0, 1, 10, 2, 1, 1, 300)).id == 1
    assert MatchStore(str(data_file)).get_clock(1).state is TimerState.STOPPED
