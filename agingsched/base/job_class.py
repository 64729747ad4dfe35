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

from agingsched.base.aging_class import AgingPolicyBase, LinearAging, check_number


class BatchError(Exception):
    pass


class PriorityJob:

    def __init__(self, job_id, static_level, arrival_time, aging_policy=None):
        """

        Priority metadata of one payload (cloudlet). The payload itself is never held by the job, only its id.

        :param job_id: Identification of the job. Same id as its payload.
        :param static_level: Base priority. Any number is accepted, higher means more urgent.
        :param arrival_time: Creation time in ms. It can't be modified.
        :param aging_policy: Policy used to derive the dynamic priority. :class:`.LinearAging` by default.

        """
        assert(isinstance(job_id, int) and not isinstance(job_id, bool)), 'job_id must be an int. Received {!r}'.format(job_id)
        if aging_policy is None:
            aging_policy = LinearAging()
        assert(isinstance(aging_policy, AgingPolicyBase)), 'Only subclasses of AgingPolicyBase are accepted.'
        self._id = job_id
        self._static_level = check_number(static_level, 'static_level')
        self._arrival_time = check_number(arrival_time, 'arrival_time')
        self._aging_policy = aging_policy
        self._wait_elapsed = 0
        self._dynamic_priority = aging_policy.priority(static_level, 0)

    @property
    def id(self):
        return self._id

    @property
    def static_level(self):
        return self._static_level

    @property
    def arrival_time(self):
        return self._arrival_time

    @property
    def wait_elapsed(self):
        return self._wait_elapsed

    @property
    def dynamic_priority(self):
        return self._dynamic_priority

    @property
    def aging_policy(self):
        return self._aging_policy

    def refresh(self, cur_time):
        """

        Recomputes the waiting time (cur_time - arrival_time) and the dynamic priority.

        :param cur_time: Current time in ms. It can't be earlier than the arrival time.

        :return: The new dynamic priority

        """
        wait_elapsed = check_number(cur_time, 'cur_time') - self._arrival_time
        # Validation happens before any field is touched
        dynamic_priority = self._aging_policy.priority(self._static_level, wait_elapsed)
        self._wait_elapsed = wait_elapsed
        self._dynamic_priority = dynamic_priority
        return dynamic_priority

    def __str__(self):
        return 'Job_{}'.format(self._id)

    def __repr__(self):
        return 'Job_{}(level={}, priority={})'.format(self._id, self._static_level, self._dynamic_priority)


class JobBatch:
    """

    Ordered collection of jobs that owns them until the batch is dispatched. Ids are unique and never reused
    within the batch.

    """

    def __init__(self, jobs=()):
        self._jobs = {}
        self._used_ids = set()
        self._dispatched = False
        for job in jobs:
            self.add(job)

    def add(self, job):
        """

        Adds a job to the batch.

        :param job: A :class:`.PriorityJob`

        """
        assert(isinstance(job, PriorityJob)), 'Only PriorityJob objects are accepted. Received {}'.format(job.__class__.__name__)
        self._check_open()
        if job.id in self._used_ids:
            raise BatchError('Job id {} is already used in the batch.'.format(job.id))
        self._used_ids.add(job.id)
        self._jobs[job.id] = job

    def refresh(self, cur_time, ids=None):
        """

        Aging pass over the batch. Every job is aged independently, but if one of them is not valid none is modified.

        :param cur_time: Current time in ms
        :param ids: Optional. Ids of the jobs to be refreshed. All the jobs by default.

        """
        self._check_open()
        if ids is None:
            jobs = list(self._jobs.values())
        else:
            jobs = [self[_id] for _id in ids]
        check_number(cur_time, 'cur_time')
        # Every job is validated before any of them is modified
        for job in jobs:
            job.aging_policy.priority(job.static_level, cur_time - job.arrival_time)
        for job in jobs:
            job.refresh(cur_time)
        return jobs

    def mark_dispatched(self):
        """

        The batch has been handed off. The jobs can't be added or aged anymore.

        """
        self._check_open()
        self._dispatched = True

    @property
    def dispatched(self):
        return self._dispatched

    @property
    def ids(self):
        return list(self._jobs)

    @property
    def jobs(self):
        return list(self._jobs.values())

    def _check_open(self):
        if self._dispatched:
            raise BatchError('The batch has already been dispatched.')

    def __getitem__(self, job_id):
        try:
            return self._jobs[job_id]
        except KeyError:
            raise BatchError('Job id {} is not part of the batch.'.format(job_id))

    def __contains__(self, job_id):
        return job_id in self._jobs

    def __iter__(self):
        return iter(self._jobs.values())

    def __len__(self):
        return len(self._jobs)

    def __repr__(self):
        return 'JobBatch({})'.format(self.ids)


class JobFactory:

    def __init__(self, aging_policy=None, job_class=PriorityJob):
        """

        Batch assembly. Creates one job per (id, static_level) pair.

        :param aging_policy: Aging policy shared by the created jobs. :class:`.LinearAging` by default.
        :param job_class: The class to be created by the Factory. PriorityJob or any subclass of it.

        """
        assert(issubclass(job_class, PriorityJob)), 'Only subclasses of PriorityJob are accepted. Received: {} class'.format(job_class.__name__)
        if aging_policy is None:
            aging_policy = LinearAging()
        assert(isinstance(aging_policy, AgingPolicyBase)), 'Only subclasses of AgingPolicyBase are accepted.'
        self.aging_policy = aging_policy
        self.job_class = job_class
        self._logger = logging.getLogger('agingsched')

    def factory(self, job_id, static_level, arrival_time):
        """

        Creates a job instance.

        :return: Returns a job instance.

        """
        return self.job_class(job_id, static_level, arrival_time, aging_policy=self.aging_policy)

    def batch(self, pairs, cur_time):
        """

        Creates a batch from (id, static_level) pairs. All the jobs share the same arrival time.

        :param pairs: Iterable of (id, static_level)
        :param cur_time: Arrival time of the jobs (ms)

        :return: A :class:`.JobBatch`

        """
        _batch = JobBatch()
        for pair in pairs:
            try:
                job_id, static_level = pair
            except (TypeError, ValueError):
                raise BatchError('Malformed pair {!r}. Expected (id, static_level).'.format(pair))
            _batch.add(self.factory(job_id, static_level, cur_time))
        self._logger.debug('{} jobs assembled at {}'.format(len(_batch), cur_time))
        return _batch
