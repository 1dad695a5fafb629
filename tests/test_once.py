import asyncio
import threading
import time

from asgiref.sync import async_to_sync, sync_to_async
from django.test import SimpleTestCase

from viewer.markdown.once import OnceGuard, once


class OnceGuardTests(SimpleTestCase):
    def test_sync_producer_runs_once(self):
        calls = []

        def producer():
            calls.append(1)
            return "value"

        guard = OnceGuard(producer)
        results = [guard() for _ in range(5)]

        self.assertEqual(results, ["value"] * 5)
        self.assertEqual(len(calls), 1)
        self.assertTrue(guard.called)

    def test_sync_failure_is_cached(self):
        calls = []

        @once
        def producer():
            calls.append(1)
            raise ValueError("boom")

        for _ in range(3):
            with self.assertRaisesMessage(ValueError, "boom"):
                producer()
        self.assertEqual(len(calls), 1)

    async def test_async_producer_is_shared_by_concurrent_callers(self):
        calls = []
        release = asyncio.Event()

        async def producer():
            calls.append(1)
            await release.wait()
            return "loaded"

        guard = OnceGuard(producer)
        pending = [guard() for _ in range(4)]
        await asyncio.sleep(0)
        self.assertFalse(any(outcome.done() for outcome in pending))

        release.set()
        results = await asyncio.gather(*pending)

        self.assertEqual(results, ["loaded"] * 4)
        self.assertEqual(await guard(), "loaded")
        self.assertEqual(len(calls), 1)

    async def test_async_failure_is_cached(self):
        calls = []

        async def producer():
            calls.append(1)
            raise RuntimeError("network down")

        guard = OnceGuard(producer)
        for _ in range(3):
            with self.assertRaisesMessage(RuntimeError, "network down"):
                await guard()
        self.assertEqual(len(calls), 1)

    def test_async_outcome_is_shared_across_event_loops(self):
        calls = []
        started = threading.Event()
        release = threading.Event()

        async def producer():
            calls.append(1)
            started.set()
            await sync_to_async(release.wait, thread_sensitive=False)(5)
            return "loaded"

        guard = OnceGuard(producer)
        outcomes = []

        async def wait_for_guard():
            return await guard()

        def request():
            try:
                outcomes.append(async_to_sync(wait_for_guard)())
            except Exception as exc:
                outcomes.append(exc)

        first = threading.Thread(target=request)
        first.start()
        self.assertTrue(started.wait(5))
        second = threading.Thread(target=request)
        second.start()
        time.sleep(0.1)
        release.set()
        first.join(5)
        second.join(5)

        self.assertEqual(outcomes, ["loaded", "loaded"])
        self.assertEqual(len(calls), 1)
