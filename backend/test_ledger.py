import os
import random
import shutil
import sys
import tempfile
import unittest

# Add backend to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from services import ledger, store
from services.document_store import DocumentStore

DATE = "2026-02-01"


def make_settings(completed_user1=100, total=500):
    return {
        "vacation": {"name": "寒假", "startDate": "2026-01-15", "endDate": "2026-02-15"},
        "exams": [],
        "subjects": [
            {
                "id": "english",
                "name": "英语",
                "color": "#22c55e",
                "assignedTo": "both",
                "homework": [
                    {
                        "id": "english-1",
                        "title": "单词本",
                        "totalPages": total,
                        "completedPages": {"user1": completed_user1, "user2": 0},
                        "unit": "词",
                    }
                ],
            }
        ],
    }


TASKS = {
    "tasks": [
        {"id": "words", "title": "背单词", "target": 50, "unit": "词", "subjectId": "english", "homeworkId": "english-1"},
        {"id": "reading", "title": "课外阅读", "target": 30, "unit": "分钟"},
        {"id": "broken", "title": "旧任务", "target": 5, "unit": "页", "subjectId": "english", "homeworkId": "gone"},
    ]
}


class LedgerTestCase(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()
        self.db = DocumentStore(self.tmp_dir)
        store.save_settings(self.db, make_settings())
        store.save_daily_tasks(self.db, TASKS)

    def tearDown(self):
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def pages(self, user_id="user1"):
        settings = store.get_settings(self.db)
        _, hw = ledger.find_homework(settings, "english", "english-1")
        return hw["completedPages"][user_id]

    def record(self, day, task_id, user_id="user1"):
        return next(c for c in day["checkIns"][user_id] if c["taskId"] == task_id)


class TestSetCheckInAmount(LedgerTestCase):
    def test_complete_then_drop_below_target(self):
        day = ledger.set_check_in_amount(self.db, DATE, "user1", "words", 50)

        rec = self.record(day, "words")
        self.assertTrue(rec["completed"])
        self.assertEqual(rec["amount"], 50)
        self.assertEqual(rec["syncedAmount"], 50)
        self.assertIn("completedAt", rec)
        self.assertEqual(self.pages(), 150)
        entries = day["homeworkProgress"]["user1"]
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0]["amount"], 50)
        self.assertEqual(entries[0]["source"], "checkin")
        self.assertEqual(entries[0]["taskId"], "words")

        day = ledger.set_check_in_amount(self.db, DATE, "user1", "words", 20)

        rec = self.record(day, "words")
        self.assertFalse(rec["completed"])
        self.assertEqual(rec["amount"], 20)
        self.assertEqual(rec["syncedAmount"], 0)
        self.assertNotIn("completedAt", rec)
        self.assertEqual(self.pages(), 100)
        self.assertEqual(day["homeworkProgress"]["user1"], [])

    def test_same_amount_twice_is_idempotent(self):
        ledger.set_check_in_amount(self.db, DATE, "user1", "words", 50)
        after_once = self.pages()
        day = ledger.set_check_in_amount(self.db, DATE, "user1", "words", 50)

        self.assertEqual(self.pages(), after_once)
        self.assertEqual(len(day["homeworkProgress"]["user1"]), 1)

    def test_partial_amount_does_not_sync(self):
        day = ledger.set_check_in_amount(self.db, DATE, "user1", "words", 30)

        rec = self.record(day, "words")
        self.assertFalse(rec["completed"])
        self.assertEqual(rec["amount"], 30)
        self.assertEqual(rec["syncedAmount"], 0)
        self.assertEqual(self.pages(), 100)
        self.assertEqual(day["homeworkProgress"]["user1"], [])

    def test_amount_is_clamped_to_target(self):
        day = ledger.set_check_in_amount(self.db, DATE, "user1", "words", 999)
        self.assertEqual(self.record(day, "words")["amount"], 50)
        self.assertEqual(self.pages(), 150)

        day = ledger.set_check_in_amount(self.db, DATE, "user1", "words", -10)
        rec = self.record(day, "words")
        self.assertEqual(rec["amount"], 0)
        self.assertFalse(rec["completed"])
        self.assertEqual(self.pages(), 100)

    def test_counter_never_leaves_bounds(self):
        store.save_settings(self.db, make_settings(completed_user1=470, total=500))
        rng = random.Random(7)
        for _ in range(200):
            ledger.set_check_in_amount(self.db, DATE, "user1", "words", rng.randint(-200, 700))
            self.assertGreaterEqual(self.pages(), 0)
            self.assertLessEqual(self.pages(), 500)

    def test_clamped_push_is_reversed_exactly(self):
        store.save_settings(self.db, make_settings(completed_user1=480, total=500))

        day = ledger.set_check_in_amount(self.db, DATE, "user1", "words", 50)
        self.assertEqual(self.pages(), 500)
        self.assertEqual(self.record(day, "words")["syncedAmount"], 20)

        ledger.set_check_in_amount(self.db, DATE, "user1", "words", 0)
        self.assertEqual(self.pages(), 480)

    def test_full_counter_leaves_no_log_entry(self):
        store.save_settings(self.db, make_settings(completed_user1=500, total=500))

        day = ledger.set_check_in_amount(self.db, DATE, "user1", "words", 50)
        rec = self.record(day, "words")
        self.assertTrue(rec["completed"])
        self.assertEqual(rec["syncedAmount"], 0)
        self.assertEqual(day["homeworkProgress"]["user1"], [])

        day = ledger.set_check_in_amount(self.db, DATE, "user1", "words", 10)
        self.assertFalse(self.record(day, "words")["completed"])
        self.assertEqual(day["homeworkProgress"]["user1"], [])
        self.assertEqual(self.pages(), 500)

    def test_dropping_below_target_removes_stale_entry(self):
        store.save_day_checkins(self.db, {
            "date": DATE,
            "checkIns": {
                "user1": [{"taskId": "words", "completed": True, "amount": 50, "syncedAmount": 0}],
                "user2": [],
            },
            "homeworkProgress": {
                "user1": [{"subjectId": "english", "homeworkId": "english-1", "amount": 50,
                           "source": "checkin", "taskId": "words", "timestamp": "2026-02-01T08:00:00+08:00"}],
                "user2": [],
            },
        })

        day = ledger.set_check_in_amount(self.db, DATE, "user1", "words", 10)

        self.assertEqual(day["homeworkProgress"]["user1"], [])
        self.assertEqual(self.pages(), 100)

    def test_unknown_task_completes_at_any_amount(self):
        day = ledger.set_check_in_amount(self.db, DATE, "user1", "nope", 3)
        rec = self.record(day, "nope")
        self.assertTrue(rec["completed"])
        self.assertEqual(rec["amount"], 3)

    def test_users_are_independent(self):
        ledger.set_check_in_amount(self.db, DATE, "user2", "words", 50)

        self.assertEqual(self.pages("user2"), 50)
        self.assertEqual(self.pages("user1"), 100)
        day = ledger.get_day(self.db, DATE)
        self.assertEqual(day["checkIns"]["user1"], [])


class TestToggleCheckIn(LedgerTestCase):
    def test_toggle_twice_restores_counter(self):
        day = ledger.toggle_check_in(self.db, DATE, "user1", "words")
        rec = self.record(day, "words")
        self.assertTrue(rec["completed"])
        self.assertEqual(rec["amount"], 50)
        self.assertEqual(rec["syncedAmount"], 50)
        self.assertEqual(self.pages(), 150)
        self.assertEqual(len(day["homeworkProgress"]["user1"]), 1)

        day = ledger.toggle_check_in(self.db, DATE, "user1", "words")
        rec = self.record(day, "words")
        self.assertFalse(rec["completed"])
        self.assertEqual(rec["amount"], 0)
        self.assertEqual(rec["syncedAmount"], 0)
        self.assertNotIn("completedAt", rec)
        self.assertEqual(self.pages(), 100)
        self.assertEqual(day["homeworkProgress"]["user1"], [])

    def test_toggle_twice_with_full_counter(self):
        store.save_settings(self.db, make_settings(completed_user1=500, total=500))

        day = ledger.toggle_check_in(self.db, DATE, "user1", "words")
        rec = self.record(day, "words")
        self.assertTrue(rec["completed"])
        self.assertEqual(rec["syncedAmount"], 0)
        self.assertEqual(day["homeworkProgress"]["user1"], [])

        day = ledger.toggle_check_in(self.db, DATE, "user1", "words")
        self.assertFalse(self.record(day, "words")["completed"])
        self.assertEqual(day["homeworkProgress"]["user1"], [])
        self.assertEqual(self.pages(), 500)
        self.assertEqual(ledger.get_homework_history(self.db, "english", "english-1"), [])

    def test_toggle_with_explicit_amount(self):
        day = ledger.toggle_check_in(self.db, DATE, "user1", "words", amount=40)

        rec = self.record(day, "words")
        self.assertTrue(rec["completed"])
        self.assertEqual(rec["amount"], 40)
        self.assertEqual(self.pages(), 140)
        self.assertEqual(day["homeworkProgress"]["user1"][0]["amount"], 40)

    def test_already_synced_amount_is_not_pushed_again(self):
        store.save_day_checkins(self.db, {
            "date": DATE,
            "checkIns": {
                "user1": [{"taskId": "words", "completed": False, "amount": 0, "syncedAmount": 50}],
                "user2": [],
            },
            "homeworkProgress": {"user1": [], "user2": []},
        })

        day = ledger.toggle_check_in(self.db, DATE, "user1", "words")

        rec = self.record(day, "words")
        self.assertTrue(rec["completed"])
        self.assertEqual(rec["syncedAmount"], 50)
        self.assertEqual(self.pages(), 100)
        self.assertEqual(day["homeworkProgress"]["user1"], [])

    def test_unlinked_task_only_updates_check_in(self):
        day = ledger.toggle_check_in(self.db, DATE, "user1", "reading")

        rec = self.record(day, "reading")
        self.assertTrue(rec["completed"])
        self.assertEqual(rec["amount"], 30)
        self.assertEqual(rec["syncedAmount"], 0)
        self.assertEqual(self.pages(), 100)
        self.assertEqual(day["homeworkProgress"]["user1"], [])

    def test_dangling_link_degrades_to_no_sync(self):
        day = ledger.toggle_check_in(self.db, DATE, "user1", "broken")

        rec = self.record(day, "broken")
        self.assertTrue(rec["completed"])
        self.assertEqual(rec["amount"], 5)
        self.assertEqual(rec["syncedAmount"], 0)
        self.assertEqual(self.pages(), 100)
        self.assertEqual(day["homeworkProgress"]["user1"], [])

    def test_unknown_task_is_recorded_without_sync(self):
        day = ledger.toggle_check_in(self.db, DATE, "user1", "nope")

        rec = self.record(day, "nope")
        self.assertTrue(rec["completed"])
        self.assertEqual(rec["amount"], 0)
        self.assertEqual(self.pages(), 100)

    def test_state_is_persisted(self):
        ledger.toggle_check_in(self.db, DATE, "user1", "words")

        day = store.get_day_checkins(self.db, DATE)
        self.assertTrue(self.record(day, "words")["completed"])
        self.assertEqual(store.list_checkin_dates(self.db), [DATE])


class TestResolveLink(unittest.TestCase):
    def test_link_states(self):
        settings = make_settings()
        self.assertEqual(ledger.resolve_link(None, settings).state, ledger.LinkState.NONE)
        self.assertEqual(ledger.resolve_link(TASKS["tasks"][1], settings).state, ledger.LinkState.NONE)
        self.assertEqual(ledger.resolve_link(TASKS["tasks"][2], settings).state, ledger.LinkState.DANGLING)
        link = ledger.resolve_link(TASKS["tasks"][0], settings)
        self.assertTrue(link.is_valid)
        self.assertEqual((link.subject_id, link.homework_id), ("english", "english-1"))


class TestManualProgress(LedgerTestCase):
    def test_manual_edit_is_clamped_and_logged(self):
        settings = ledger.set_homework_progress(self.db, "user1", "english", "english-1", 900, date_str=DATE, note="补记")

        _, hw = ledger.find_homework(settings, "english", "english-1")
        self.assertEqual(hw["completedPages"]["user1"], 500)
        entries = store.get_day_checkins(self.db, DATE)["homeworkProgress"]["user1"]
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0]["source"], "manual")
        self.assertEqual(entries[0]["amount"], 400)
        self.assertEqual(entries[0]["note"], "补记")

    def test_unchanged_value_logs_nothing(self):
        ledger.set_homework_progress(self.db, "user1", "english", "english-1", 100, date_str=DATE)
        self.assertEqual(store.list_checkin_dates(self.db), [])

    def test_unknown_homework(self):
        with self.assertRaises(LookupError):
            ledger.set_homework_progress(self.db, "user1", "english", "missing", 10, date_str=DATE)

    def test_history_spans_days_and_users(self):
        ledger.toggle_check_in(self.db, "2026-02-01", "user1", "words")
        ledger.toggle_check_in(self.db, "2026-02-02", "user2", "words")
        ledger.set_homework_progress(self.db, "user1", "english", "english-1", 120, date_str="2026-02-03")

        history = ledger.get_homework_history(self.db, "english", "english-1")

        self.assertEqual(len(history), 3)
        self.assertEqual({h["date"] for h in history}, {"2026-02-01", "2026-02-02", "2026-02-03"})
        self.assertIn("manual", [h["source"] for h in history])
        timestamps = [h["timestamp"] for h in history]
        self.assertEqual(timestamps, sorted(timestamps, reverse=True))


if __name__ == '__main__':
    unittest.main()
