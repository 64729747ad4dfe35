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

from os import getpid, path
from time import perf_counter
from queue import Queue
from logging import handlers
from psutil import Process

from agingsched.utils.misc import DEFAULT_BROKER, FrozenDict, load_config, current_time_millis, \
    define_trace_level, pprint_header, pprint_task
from agingsched.utils.file import dir_exists, save_jsonfile
from agingsched.utils.dispatch_writer import PPrintWriter
from agingsched.base.aging_class import AgingPolicyBase, AgingError, LinearAging
from agingsched.base.job_class import JobBatch, JobFactory, BatchError
from agingsched.base.scheduler_class import SchedulerBase, SchedulerError, PriorityAging
from agingsched.base.dispatcher_class import Dispatcher, DispatchError, payload_mapping
from agingsched.base.engine_class import ExecutionEngine


class Broker:
    """

    Assembles the batch of jobs, ages it, sorts it and hands the ordered payloads to the execution engine in a
    single call. Either the whole ordered batch is submitted or nothing is.

    """

    LOG_FORMAT = '%(asctime)-15s %(module)s-%(levelname)s: %(message)s'

    def __init__(self, engine, scheduler=None, aging_policy=None, dispatcher=None, config_file=None, clock=None,
                 pprint_output=False, benchmark_output=False, **kwargs):
        """

        Broker constructor

        :param engine: Instantiation of an :class:`.ExecutionEngine`.
        :param scheduler: Optional. Sorting policy. :class:`.PriorityAging` by default.
        :param aging_policy: Optional. Aging policy. :class:`.LinearAging` with BASE_WEIGHT and AGING_DIVISOR by default.
        :param dispatcher: Optional. Dispatch sequencing. :class:`.Dispatcher` by default.
        :param config_file: Optional. Filepath to a json config. It replaces the misc.DEFAULT_BROKER parameters.
        :param clock: Optional. Callable returning the current time in ms. misc.current_time_millis by default.
        :param pprint_output: Default False. Writes the sorted task table of each submission.
        :param benchmark_output: Default False. Measures the stages of each submission.
        :param **kwargs: Parameters that replace the default and config file ones (e.g. LOG_LEVEL='DEBUG').

        """
        assert(isinstance(engine, ExecutionEngine)), 'Only subclasses of ExecutionEngine are accepted as engine.'
        kwargs['PPRINT_OUTPUT'] = pprint_output
        kwargs['BENCHMARK_OUTPUT'] = benchmark_output
        self.config = self.define_default_constants(config_file, **kwargs)
        self._logger, self._logger_listener, self._queue_handler = self.define_logger()

        if aging_policy is None:
            aging_policy = LinearAging(self.config.BASE_WEIGHT, self.config.AGING_DIVISOR)
        assert(isinstance(aging_policy, AgingPolicyBase)), 'Only subclasses of AgingPolicyBase are accepted.'
        if scheduler is None:
            scheduler = PriorityAging()
        assert(isinstance(scheduler, SchedulerBase)), 'Only subclasses of SchedulerBase are accepted.'
        if dispatcher is None:
            dispatcher = Dispatcher()
        assert(isinstance(dispatcher, Dispatcher)), 'Only Dispatcher objects are accepted.'

        self.engine = engine
        self.scheduler = scheduler
        self.aging_policy = aging_policy
        self.dispatcher = dispatcher
        self.job_factory = JobFactory(aging_policy)
        self.clock = clock or current_time_millis

        if pprint_output or benchmark_output:
            dir_exists(self.config.RESULTS_FOLDER_PATH, create=True)
        self._process_obj = Process(getpid()) if benchmark_output else None
        self.benchmark = None
        self.submissions = 0
        self._config_shown = False

    def define_default_constants(self, config_filepath, **kwargs):
        """

        Defines the parameters of the broker: the defaults, replaced by the config file, replaced by the kwargs.

        :param config_filepath: Path to the config file in json format

        :return: A :class:`.FrozenDict` with the parameters

        """
        config = dict(DEFAULT_BROKER)
        if config_filepath:
            config.update(load_config(config_filepath))
        config.update(kwargs)
        return FrozenDict(config)

    def define_logger(self):
        define_trace_level()
        log_level = self.config.LOG_LEVEL

        queue = Queue(-1)
        queue_handler = handlers.QueueHandler(queue)
        handler = logging.StreamHandler()
        handler.setLevel(log_level)
        handler.setFormatter(logging.Formatter(self.LOG_FORMAT))
        listener = handlers.QueueListener(queue, handler)

        logger = logging.getLogger('agingsched')
        logger.setLevel(getattr(logging, log_level))
        return logger, listener, queue_handler

    def _start_logging(self):
        self._logger.addHandler(self._queue_handler)
        self._logger_listener.start()

    def _stop_logging(self):
        self._logger_listener.stop()
        self._logger.removeHandler(self._queue_handler)

    def show_config(self):
        """

        Shows the current broker config

        """
        self._logger.info('Settings: ')
        self._logger.info('\tEngine: {}'.format(self.engine))
        self._logger.info('\tScheduler: {}'.format(self.scheduler.get_id()))
        self._logger.info('\tAging policy: {!r}'.format(self.aging_policy))
        self._logger.info('\tResults folder: {}'.format(self.config.RESULTS_FOLDER_PATH))
        self._logger.info('\t\t ({}) Task table output. Prefix: {}'.format(self.on_off(self.config.PPRINT_OUTPUT),
                                                                     self.config.PPRINT_PREFIX))
        self._logger.info('\t\t ({}) Benchmark output. Prefix: {}'.format(self.on_off(self.config.BENCHMARK_OUTPUT),
                                                                   self.config.BENCHMARK_PREFIX))

    def on_off(self, state):
        return 'ON' if state else 'OFF'

    def now(self, cur_time=None):
        return self.clock() if cur_time is None else cur_time

    def assemble(self, pairs, cur_time=None):
        """

        Creates a batch with one job per (id, static_level) pair, all arrived at cur_time.

        :param pairs: Iterable of (id, static_level)
        :param cur_time: Optional. Arrival time (ms). The clock is used if it is not given.

        :return: A :class:`.JobBatch`

        """
        return self.job_factory.batch(pairs, self.now(cur_time))

    def refresh(self, batch, cur_time=None, ids=None):
        """

        Aging pass over the batch (or the jobs of ids).

        """
        return batch.refresh(self.now(cur_time), ids=ids)

    def plan(self, batch, payloads, key=None):
        """

        Sorts the batch and sequences its payloads, without aging and without submitting.

        :param batch: A :class:`.JobBatch`
        :param payloads: Mapping id -> payload or sequence of payloads (see :func:`.payload_mapping`)
        :param key: Optional. Callable that returns the id of a payload.

        :return: tuple (sorted jobs, ordered payloads)

        """
        sorted_jobs = self.scheduler.schedule(batch)
        return sorted_jobs, self.dispatcher.sequence(sorted_jobs, payload_mapping(payloads, key))

    def submit(self, batch, payloads, cur_time=None, refresh=True, key=None):
        """

        Ages the batch, sorts it, sequences the payloads and submits them to the engine. The engine is called once,
        and only after every previous step succeeded.

        :param batch: A :class:`.JobBatch`
        :param payloads: Mapping id -> payload or sequence of payloads (see :func:`.payload_mapping`)
        :param cur_time: Optional. Time of the aging pass (ms). The clock is used if it is not given.
        :param refresh: Default True. If False, the current priorities are used as they are.
        :param key: Optional. Callable that returns the id of a payload.

        :return: The results of the engine, unmodified.

        """
        assert(isinstance(batch, JobBatch)), 'Only JobBatch objects are accepted.'
        self._start_logging()
        try:
            return self._submit(batch, payloads, cur_time, refresh, key)
        finally:
            self._stop_logging()

    def run(self, pairs, payloads, cur_time=None, key=None):
        """

        Assembles a batch and submits it at once.

        :return: The results of the engine, unmodified.

        """
        cur_time = self.now(cur_time)
        return self.submit(self.assemble(pairs, cur_time), payloads, cur_time=cur_time, key=key)

    def _submit(self, batch, payloads, cur_time, refresh, key):
        if not self._config_shown:
            self.show_config()
            self._config_shown = True
        self.submissions += 1
        times = {}
        try:
            mapping = payload_mapping(payloads, key)

            _start = perf_counter()
            if refresh:
                self.refresh(batch, cur_time)
            times['aging'] = (perf_counter() - _start) * 1000
            self._log_table('Unsorted Cloudlets', batch)

            _start = perf_counter()
            sorted_jobs = self.scheduler.schedule(batch)
            times['sorting'] = (perf_counter() - _start) * 1000
            self._log_table('Sorted Cloudlets', sorted_jobs)

            _start = perf_counter()
            ordered_payloads = self.dispatcher.sequence(sorted_jobs, mapping)
            times['sequencing'] = (perf_counter() - _start) * 1000
        except (AgingError, BatchError, SchedulerError, DispatchError) as e:
            self._logger.error('Submission #{} aborted, nothing was submitted. Reason: {}'.format(self.submissions, e))
            raise

        if self.config.PPRINT_OUTPUT:
            self._write_table(sorted_jobs)

        self._logger.info('Submission #{}: {} payloads to {}'.format(self.submissions, len(ordered_payloads), self.engine))
        batch.mark_dispatched()
        _start = perf_counter()
        try:
            results = self.engine.submit_batch(ordered_payloads)
        except Exception as e:
            self._logger.error('The engine failed on submission #{}: {}'.format(self.submissions, e))
            raise
        times['submission'] = (perf_counter() - _start) * 1000

        if self.config.BENCHMARK_OUTPUT:
            self._save_benchmark(len(ordered_payloads), times)
        return results

    def _log_table(self, title, jobs):
        if not self._logger.isEnabledFor(logging.DEBUG):
            return
        output_format = self.config.PPRINT_TASK_OUTPUT
        self._logger.debug('-*-*-*-*-*-*-*-*-*-*-*- {} -*-*-*-*-*-*-*-*-*-*-*-'.format(title))
        self._logger.debug(pprint_header(output_format))
        for job in jobs:
            self._logger.debug(pprint_task(job, output_format))

    def _output_filepath(self, prefix, extension):
        return path.join(self.config.RESULTS_FOLDER_PATH, '{}{}{}'.format(prefix, self.config.BATCH_NAME, extension))

    def _write_table(self, sorted_jobs):
        filepath = self._output_filepath(self.config.PPRINT_PREFIX, '.txt')
        with PPrintWriter(filepath, self.config.PPRINT_TASK_OUTPUT, overwrite=True) as writer:
            writer.write_jobs(sorted_jobs)
        self._logger.debug('Task table written in {}'.format(filepath))

    def _save_benchmark(self, batch_size, times):
        memory = self._process_obj.memory_info()
        self.benchmark = {
            'submission': self.submissions,
            'batch_size': batch_size,
            'times_ms': times,
            'memory_rss': memory.rss
        }
        filepath = self._output_filepath(self.config.BENCHMARK_PREFIX, '.json')
        save_jsonfile(filepath, self.benchmark, indent=2)
        self._logger.debug('Benchmark written in {}'.format(filepath))

    def output_filepaths(self):
        """

        Filepaths of the enabled outputs.

        """
        possible_filepaths = [
            (self.config.PPRINT_OUTPUT, self.config.PPRINT_PREFIX, self._output_filepath(self.config.PPRINT_PREFIX, '.txt')),
            (self.config.BENCHMARK_OUTPUT, self.config.BENCHMARK_PREFIX, self._output_filepath(self.config.BENCHMARK_PREFIX, '.json'))
        ]
        return {f[1]: f[2] for f in possible_filepaths if f[0]}
