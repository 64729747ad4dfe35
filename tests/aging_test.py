import unittest

from agingsched.base.aging_class import LinearAging, AgingError


class LinearAgingTests(unittest.TestCase):

    LEVELS = [-5, -1, 0, 0.5, 1, 2, 5, 10]
    WAITS = [0, 1, 999, 1000, 4000, 400000, 10 ** 7]

    def setUp(self):
        self.policy = LinearAging()

    def test_reference_values(self):
        self.assertEqual(self.policy.priority(5, 0), 500)
        self.assertEqual(self.policy.priority(1.0, 4000), 104.0)
        self.assertEqual(self.policy.priority(2, 2500), 205.0)

    def test_monotonic_in_wait(self):
        for level in self.LEVELS:
            priorities = [self.policy.priority(level, wait) for wait in self.WAITS]
            for before, after in zip(priorities, priorities[1:]):
                self.assertGreaterEqual(after, before, 'Level {}'.format(level))

    def test_monotonic_in_level(self):
        for wait in self.WAITS:
            priorities = [self.policy.priority(level, wait) for level in self.LEVELS]
            for before, after in zip(priorities, priorities[1:]):
                self.assertGreater(after, before, 'Wait {}'.format(wait))

    def test_same_wait_same_priority(self):
        self.assertEqual(self.policy.priority(3, 1234), self.policy.priority(3, 1234))

    def test_negative_wait_rejected(self):
        with self.assertRaises(AgingError):
            self.policy.priority(1, -1)

    def test_malformed_inputs(self):
        for value in ['1', None, True, float('nan'), float('inf')]:
            with self.assertRaises(AgingError):
                self.policy.priority(value, 0)
            with self.assertRaises(AgingError):
                self.policy.priority(1, value)

    def test_aging_error_is_value_error(self):
        self.assertTrue(issubclass(AgingError, ValueError))

    def test_negative_level_keeps_baseline(self):
        self.assertEqual(self.policy.priority(-2, 0), -200)
        self.assertEqual(self.policy.priority(-2, 50000), -200)

    def test_crossover_wait(self):
        wait = self.policy.crossover_wait(1, 5)
        self.assertEqual(wait, 400000)
        self.assertEqual(self.policy.priority(1, 400000), self.policy.priority(5, 0))
        self.assertGreater(self.policy.priority(1, 400001), self.policy.priority(5, 0))
        self.assertLess(self.policy.priority(1, 399999), self.policy.priority(5, 0))

    def test_crossover_without_aging_credit(self):
        self.assertIsNone(self.policy.crossover_wait(-1, 5))
        self.assertEqual(self.policy.crossover_wait(5, 1), 0)

    def test_custom_constants(self):
        policy = LinearAging(base_weight=10, divisor=100)
        self.assertEqual(policy.priority(2, 50), 21)

    def test_invalid_constants(self):
        with self.assertRaises(AssertionError):
            LinearAging(base_weight=0)
        with self.assertRaises(AssertionError):
            LinearAging(divisor=-1)
        with self.assertRaises(AgingError):
            LinearAging(base_weight='100')


if __name__ == '__main__':
    unittest.main()
