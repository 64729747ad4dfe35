import unittest

from random import seed, randint

from agingsched.base.job_class import PriorityJob, JobFactory
from agingsched.base.scheduler_class import PriorityAging, StaticPriority, FirstInFirstOut, SchedulerError


class PriorityAgingTests(unittest.TestCase):

    LEVELS = [2, 1, 5, 6, 3, 4, 2, 5]

    def setUp(self):
        self.scheduler = PriorityAging()

    def test_fresh_batch(self):
        batch = JobFactory().batch(enumerate(self.LEVELS), 0)
        batch.refresh(0)
        sorted_jobs = self.scheduler.schedule(batch)

        self.assertEqual([job.static_level for job in sorted_jobs], [6, 5, 5, 4, 3, 2, 2, 1])
        self.assertEqual([job.id for job in sorted_jobs], [3, 2, 7, 5, 4, 0, 6, 1])

    def test_longer_wait_first(self):
        recent = PriorityJob(0, 1.0, 4000)
        older = PriorityJob(1, 1.0, 0)
        for job in (recent, older):
            job.refresh(4000)

        self.assertEqual(recent.wait_elapsed, 0)
        self.assertEqual(older.wait_elapsed, 4000)
        self.assertGreater(older.dynamic_priority, recent.dynamic_priority)
        self.assertEqual(self.scheduler.schedule([recent, older]), [older, recent])

    def _crossover_pair(self, low_wait, now=500000):
        high = PriorityJob(0, 5, now)
        low = PriorityJob(1, 1, now - low_wait)
        high.refresh(now)
        low.refresh(now)
        return [job.id for job in self.scheduler.schedule([high, low])]

    def test_aging_overtakes_higher_level(self):
        self.assertEqual(self._crossover_pair(400001), [1, 0])

    def test_no_overtake_before_crossover(self):
        self.assertEqual(self._crossover_pair(399999), [0, 1])

    def test_tie_at_crossover_by_id(self):
        self.assertEqual(self._crossover_pair(400000), [0, 1])

    def test_same_ids_out(self):
        seed('test_same_ids_out')
        jobs = [PriorityJob(i, randint(-3, 10), randint(0, 10000)) for i in range(200)]
        for job in jobs:
            job.refresh(10000)
        sorted_jobs = self.scheduler.schedule(jobs)

        self.assertCountEqual([job.id for job in sorted_jobs], [job.id for job in jobs])
        for before, after in zip(sorted_jobs, sorted_jobs[1:]):
            self.assertGreaterEqual(before.dynamic_priority, after.dynamic_priority)
            if before.dynamic_priority == after.dynamic_priority:
                self.assertLess(before.id, after.id)

    def test_sort_does_not_age(self):
        jobs = [PriorityJob(0, 1, 0), PriorityJob(1, 1, 1000)]
        for job in jobs:
            job.refresh(1000)
        priorities = [job.dynamic_priority for job in jobs]
        self.scheduler.schedule(jobs)
        self.scheduler.schedule(jobs)
        self.assertEqual([job.dynamic_priority for job in jobs], priorities)
        self.assertEqual([job.wait_elapsed for job in jobs], [1000, 0])

    def test_duplicated_ids(self):
        with self.assertRaises(SchedulerError):
            self.scheduler.schedule([PriorityJob(0, 1, 0), PriorityJob(0, 2, 0)])

    def test_empty_batch(self):
        self.assertEqual(self.scheduler.schedule([]), [])

    def test_id(self):
        self.assertEqual(self.scheduler.get_id(), 'PriorityAging-PA')
        self.assertEqual(str(self.scheduler), 'PriorityAging-PA')


class AlternativeOrderTests(unittest.TestCase):

    def _jobs(self):
        jobs = [PriorityJob(0, 1, 0), PriorityJob(1, 2, 200000), PriorityJob(2, 1, 150000), PriorityJob(3, 2, 200000)]
        for job in jobs:
            job.refresh(200000)
        return jobs

    def test_static_priority(self):
        sorted_jobs = StaticPriority().schedule(self._jobs())
        self.assertEqual([job.id for job in sorted_jobs], [1, 3, 0, 2])

    def test_first_in_first_out(self):
        sorted_jobs = FirstInFirstOut().schedule(self._jobs())
        self.assertEqual([job.id for job in sorted_jobs], [0, 2, 1, 3])

    def test_aging_differs_from_static(self):
        sorted_jobs = PriorityAging().schedule(self._jobs())
        self.assertEqual([job.id for job in sorted_jobs], [0, 1, 3, 2])


if __name__ == '__main__':
    unittest.main()
