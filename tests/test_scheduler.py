"""Tests for the cooperative schedulers."""

import threading

from telemetry_table.core.scheduler import Scheduler, TaskQueue


def test_task_queue_is_a_scheduler():
    assert isinstance(TaskQueue(), Scheduler)


def test_nothing_runs_until_drained():
    queue = TaskQueue()
    ran = []
    queue.call_soon(lambda: ran.append(1))
    assert ran == []
    assert queue.pending == 1
    assert queue.run_next() is True
    assert ran == [1]
    assert queue.run_next() is False


def test_fifo_and_tasks_enqueued_while_draining():
    queue = TaskQueue()
    ran = []

    def first():
        ran.append("first")
        queue.call_soon(lambda: ran.append("third"))

    queue.call_soon(first)
    queue.call_soon(lambda: ran.append("second"))

    assert queue.run_all() == 3
    assert ran == ["first", "second", "third"]


def test_cancelled_task_is_skipped():
    queue = TaskQueue()
    ran = []
    handle = queue.call_soon(lambda: ran.append("cancelled"))
    queue.call_soon(lambda: ran.append("kept"))
    queue.cancel(handle)

    assert queue.pending == 1
    queue.run_all()
    assert ran == ["kept"]
    assert queue.scheduled_count == 2


def test_call_soon_from_worker_thread():
    queue = TaskQueue()
    ran = []
    worker = threading.Thread(target=lambda: queue.call_soon(lambda: ran.append(threading.get_ident())))
    worker.start()
    worker.join()

    queue.run_all()
    assert ran == [threading.get_ident()]


class TestQtScheduler:
    def test_runs_on_event_loop(self, qtbot):
        from telemetry_table.app.scheduler import QtScheduler

        scheduler = QtScheduler()
        ran = []
        scheduler.call_soon(lambda: ran.append("soon"))
        assert ran == []  # queued, not immediate
        qtbot.waitUntil(lambda: ran == ["soon"], timeout=1000)

    def test_cancel_drops_task(self, qtbot):
        from telemetry_table.app.scheduler import QtScheduler

        scheduler = QtScheduler()
        ran = []
        handle = scheduler.call_soon(lambda: ran.append("cancelled"))
        scheduler.cancel(handle)
        scheduler.call_soon(lambda: ran.append("kept"))
        qtbot.waitUntil(lambda: ran == ["kept"], timeout=1000)

    def test_cross_thread_post_runs_on_gui_thread(self, qtbot):
        from telemetry_table.app.scheduler import QtScheduler

        scheduler = QtScheduler()
        ran = []
        worker = threading.Thread(
            target=lambda: scheduler.call_soon(lambda: ran.append(threading.get_ident()))
        )
        worker.start()
        worker.join()
        qtbot.waitUntil(lambda: len(ran) == 1, timeout=1000)
        assert ran == [threading.get_ident()]
