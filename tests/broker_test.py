import os
import json
import unittest

from shutil import rmtree
from tempfile import mkdtemp

from agingsched.base.broker_class import Broker
from agingsched.base.engine_class import ExecutionEngine
from agingsched.base.aging_class import AgingError
from agingsched.base.job_class import BatchError
from agingsched.base.dispatcher_class import DispatchError
from agingsched.base.scheduler_class import FirstInFirstOut
from agingsched.utils.misc import generate_config


class RecordingEngine(ExecutionEngine):

    def __init__(self):
        self.calls = []

    def submit_batch(self, payloads):
        self.calls.append(list(payloads))
        return [('Success', p) for p in payloads]


class FailingEngine(ExecutionEngine):

    def __init__(self, error):
        self.error = error

    def submit_batch(self, payloads):
        raise self.error


class FakeClock:

    def __init__(self, now=0):
        self.now = now

    def __call__(self):
        return self.now


class BrokerTests(unittest.TestCase):

    LEVELS = [2, 1, 5, 6, 3, 4, 2, 5]

    def setUp(self):
        self.engine = RecordingEngine()
        self.clock = FakeClock(0)
        self.broker = Broker(self.engine, clock=self.clock)
        self.payloads = ['cloudlet_{}'.format(i) for i in range(len(self.LEVELS))]

    def test_run_fresh_batch(self):
        results = self.broker.run(enumerate(self.LEVELS), self.payloads)

        self.assertEqual(len(self.engine.calls), 1)
        submitted = self.engine.calls[0]
        self.assertEqual(submitted, ['cloudlet_{}'.format(i) for i in [3, 2, 7, 5, 4, 0, 6, 1]])
        self.assertEqual(results, [('Success', p) for p in submitted])

    def test_submit_ages_with_clock(self):
        batch = self.broker.assemble([(0, 1.0)])
        self.clock.now = 4000
        batch.add(self.broker.job_factory.factory(1, 1.0, self.clock.now))
        self.broker.submit(batch, {0: 'old', 1: 'new'})

        self.assertEqual(batch[0].wait_elapsed, 4000)
        self.assertEqual(batch[1].wait_elapsed, 0)
        self.assertEqual(self.engine.calls[0], ['old', 'new'])

    def test_missing_payload_no_partial_submission(self):
        batch = self.broker.assemble(enumerate([2, 1, 5, 6]))
        payloads = {0: 'a', 1: 'b', 3: 'd'}
        with self.assertLogs('agingsched', level='ERROR'):
            with self.assertRaises(LookupError):
                self.broker.submit(batch, payloads)

        self.assertEqual(self.engine.calls, [])
        self.assertFalse(batch.dispatched)

    def test_missing_payload_error_type(self):
        batch = self.broker.assemble(enumerate([2, 1, 5, 6]))
        with self.assertRaises(DispatchError):
            self.broker.submit(batch, ['a', 'b', 'c'])
        self.assertEqual(self.engine.calls, [])

    def test_negative_wait_no_submission(self):
        batch = self.broker.assemble(enumerate([1, 2]), cur_time=5000)
        with self.assertRaises(AgingError):
            self.broker.submit(batch, ['a', 'b'], cur_time=1000)
        self.assertEqual(self.engine.calls, [])

    def test_engine_error_unmodified(self):
        error = RuntimeError('engine down')
        broker = Broker(FailingEngine(error), clock=self.clock)
        batch = broker.assemble(enumerate([1, 2]))
        with self.assertRaises(RuntimeError) as cm:
            broker.submit(batch, ['a', 'b'])
        self.assertIs(cm.exception, error)

    def test_batch_is_dispatched_once(self):
        batch = self.broker.assemble(enumerate([1, 2]))
        self.broker.submit(batch, ['a', 'b'])
        self.assertTrue(batch.dispatched)
        with self.assertRaises(BatchError):
            self.broker.submit(batch, ['a', 'b'])
        with self.assertRaises(BatchError):
            self.broker.submit(batch, ['a', 'b'], refresh=False)
        self.assertEqual(len(self.engine.calls), 1)

    def test_stale_priorities_without_refresh(self):
        batch = self.broker.assemble([(0, 1)], cur_time=0)
        batch.add(self.broker.job_factory.factory(1, 1, 4000))
        self.broker.submit(batch, ['a', 'b'], cur_time=10000, refresh=False)

        self.assertEqual(batch[0].wait_elapsed, 0)
        self.assertEqual(self.engine.calls[0], ['a', 'b'])

    def test_partial_refresh(self):
        batch = self.broker.assemble(enumerate([1, 1, 1]), cur_time=0)
        self.broker.refresh(batch, cur_time=2000, ids=[2])
        self.broker.submit(batch, ['a', 'b', 'c'], refresh=False)
        self.assertEqual(self.engine.calls[0], ['c', 'a', 'b'])

    def test_plan_does_not_submit(self):
        batch = self.broker.assemble(enumerate([1, 3]))
        sorted_jobs, ordered = self.broker.plan(batch, ['a', 'b'])
        self.assertEqual([job.id for job in sorted_jobs], [1, 0])
        self.assertEqual(ordered, ['b', 'a'])
        self.assertEqual(self.engine.calls, [])
        self.assertFalse(batch.dispatched)

    def test_payload_key(self):
        payloads = [{'id': 7, 'name': 'x'}, {'id': 9, 'name': 'y'}]
        self.broker.run([(7, 1), (9, 2)], payloads, key=lambda p: p['id'])
        self.assertEqual([p['name'] for p in self.engine.calls[0]], ['y', 'x'])

    def test_other_scheduler(self):
        broker = Broker(self.engine, scheduler=FirstInFirstOut(), clock=self.clock)
        broker.run(enumerate([1, 5, 3]), ['a', 'b', 'c'])
        self.assertEqual(self.engine.calls[0], ['a', 'b', 'c'])

    def test_invalid_engine(self):
        with self.assertRaises(AssertionError):
            Broker(object())


class BrokerConfigTests(unittest.TestCase):

    def setUp(self):
        self.folder = mkdtemp()

    def tearDown(self):
        rmtree(self.folder)

    def test_defaults(self):
        broker = Broker(RecordingEngine())
        self.assertEqual(broker.config.BASE_WEIGHT, 100)
        self.assertEqual(broker.config.AGING_DIVISOR, 1000)
        self.assertEqual(broker.aging_policy.base_weight, 100)

    def test_config_file_and_kwargs(self):
        config_fp = os.path.join(self.folder, 'broker.config')
        generate_config(config_fp, BASE_WEIGHT=10, AGING_DIVISOR=100, BATCH_NAME='from_file')

        broker = Broker(RecordingEngine(), config_file=config_fp, BATCH_NAME='from_kwargs')
        self.assertEqual(broker.config.BASE_WEIGHT, 10)
        self.assertEqual(broker.config.BATCH_NAME, 'from_kwargs')
        self.assertEqual(broker.aging_policy.priority(2, 50), 21)

    def test_outputs(self):
        engine = RecordingEngine()
        broker = Broker(engine, clock=FakeClock(0), pprint_output=True, benchmark_output=True,
                        RESULTS_FOLDER_PATH=self.folder, BATCH_NAME='test')
        broker.run(enumerate([2, 1, 5]), ['a', 'b', 'c'])

        filepaths = broker.output_filepaths()
        pprint_fp = filepaths[broker.config.PPRINT_PREFIX]
        with open(pprint_fp) as f:
            lines = f.read().splitlines()
        self.assertEqual(len(lines), 4)
        self.assertTrue(lines[0].startswith('Cloudlet Index'))
        self.assertEqual([line.split()[0] for line in lines[1:]], ['2', '0', '1'])

        with open(filepaths[broker.config.BENCHMARK_PREFIX]) as f:
            benchmark = json.load(f)
        self.assertEqual(benchmark['batch_size'], 3)
        self.assertGreater(benchmark['memory_rss'], 0)
        self.assertCountEqual(benchmark['times_ms'].keys(), ['aging', 'sorting', 'sequencing', 'submission'])
        self.assertEqual(broker.benchmark, benchmark)

    def test_failed_table_write_keeps_batch_open(self):
        engine = RecordingEngine()
        folder = os.path.join(self.folder, 'gone')
        broker = Broker(engine, clock=FakeClock(0), pprint_output=True, RESULTS_FOLDER_PATH=folder)
        rmtree(folder)
        batch = broker.assemble(enumerate([1, 2]))
        with self.assertRaises(OSError):
            broker.submit(batch, ['a', 'b'])
        self.assertFalse(batch.dispatched)
        self.assertEqual(engine.calls, [])

    def test_settings_logged_once(self):
        broker = Broker(RecordingEngine(), clock=FakeClock(0))
        with self.assertLogs('agingsched', level='INFO') as cm:
            broker.run(enumerate([1]), ['a'])
            broker.run(enumerate([2]), ['b'])
        self.assertEqual(sum(1 for line in cm.output if 'Settings' in line), 1)
        self.assertEqual(broker.submissions, 2)

    def test_no_outputs_by_default(self):
        broker = Broker(RecordingEngine(), RESULTS_FOLDER_PATH=self.folder)
        broker.run(enumerate([1]), ['a'], cur_time=0)
        self.assertEqual(broker.output_filepaths(), {})
        self.assertEqual(os.listdir(self.folder), [])
        self.assertIsNone(broker.benchmark)


if __name__ == '__main__':
    unittest.main()
