"""
MIT License

Copyright (c) 2017 cgalleguillosm

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
SOFTWARE.
"""
import logging

from threading import Lock

from agingsched.utils.misc import current_time_millis
from agingsched.base.aging_class import check_number
from agingsched.base.job_class import JobBatch, JobFactory, BatchError
from agingsched.base.scheduler_class import SchedulerBase, PriorityAging


class AgingQueue:
    """
    Queue of jobs fed by several producers and aged continuously. Every operation over the jobs holds the same lock,
    so a sort never observes a half refreshed queue and producers never interleave with a refresh or a sort.
    """

    def __init__(self, aging_policy=None, scheduler=None, refresh_interval=1000, clock=None):
        """
        Constructor for the class

        :param aging_policy: Aging policy of the queued jobs. LinearAging by default.
        :param scheduler: Sorting policy. PriorityAging by default.
        :param refresh_interval: Minimum time (ms) between two refreshes done by :func:`maybe_refresh`.
        :param clock: Callable returning the current time in ms.
        """
        if scheduler is None:
            scheduler = PriorityAging()
        assert(isinstance(scheduler, SchedulerBase)), 'Only subclasses of SchedulerBase are accepted.'
        assert(refresh_interval >= 0), 'refresh_interval can\'t be negative.'
        self._factory = JobFactory(aging_policy)
        self._scheduler = scheduler
        self._jobs = {}
        self._lock = Lock()
        self._last_refresh = None
        self.refresh_interval = refresh_interval
        self.clock = clock or current_time_millis
        self._logger = logging.getLogger('agingsched')

    def push(self, job_id, static_level, cur_time=None):
        """
        Adds a new job, arrived at cur_time.

        :return: The new job
        """
        with self._lock:
            if job_id in self._jobs:
                raise BatchError('Job id {} is already queued.'.format(job_id))
            job = self._factory.factory(job_id, static_level, self._now(cur_time))
            self._jobs[job_id] = job
        return job

    def refresh(self, cur_time=None):
        """
        Ages all the queued jobs. The new priorities are computed over a snapshot and applied only when all of them
        are valid.
        """
        with self._lock:
            self._refresh(self._now(cur_time))

    def maybe_refresh(self, cur_time=None):
        """
        Ages the queued jobs only if refresh_interval has passed since the last refresh.

        :return: True if the jobs were refreshed
        """
        with self._lock:
            cur_time = self._now(cur_time)
            if self._last_refresh is not None and cur_time - self._last_refresh < self.refresh_interval:
                return False
            self._refresh(cur_time)
            return True

    def snapshot(self):
        """
        :return: The queued jobs sorted with the priorities of the last refresh. The list is a copy, but the jobs are
            the queued ones: a later refresh updates their priorities.
        """
        with self._lock:
            return self._scheduler.schedule(self._jobs.values())

    def drain(self, cur_time=None):
        """
        Refreshes, sorts and removes all the queued jobs.

        :return: A :class:`.JobBatch` with the jobs in dispatching order
        """
        with self._lock:
            self._refresh(self._now(cur_time))
            sorted_jobs = self._scheduler.schedule(self._jobs.values())
            self._jobs = {}
        self._logger.debug('{} jobs drained from the queue'.format(len(sorted_jobs)))
        return JobBatch(sorted_jobs)

    def _refresh(self, cur_time):
        check_number(cur_time, 'cur_time')
        jobs = list(self._jobs.values())
        # Every job is validated before any of them is modified
        for job in jobs:
            job.aging_policy.priority(job.static_level, cur_time - job.arrival_time)
        for job in jobs:
            job.refresh(cur_time)
        self._last_refresh = cur_time
        self._logger.trace('{} queued jobs refreshed at {}'.format(len(jobs), cur_time))

    def _now(self, cur_time):
        return self.clock() if cur_time is None else cur_time

    def __len__(self):
        with self._lock:
            return len(self._jobs)
