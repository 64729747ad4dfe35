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
from abc import ABC, abstractmethod
from math import isfinite
from numbers import Real


class AgingError(ValueError):
    """

    Invalid input for an aging policy: a negative waiting time, or a level/timestamp that is not a finite number.

    """
    pass


def check_number(value, name):
    """

    Verifies that value is a finite real number. Booleans are not accepted.

    :param value: Value to be verified
    :param name: Name of the value, used in the error message

    :return: The value

    """
    if isinstance(value, bool) or not isinstance(value, Real) or not isfinite(value):
        raise AgingError('{} must be a finite number. Received {!r}'.format(name, value))
    return value


class AgingPolicyBase(ABC):
    """

    An aging policy converts the static level of a job and the time it has been waiting into its dynamic priority.
    Implementations must be pure: the same (static_level, wait_elapsed) always give the same priority, and the
    priority must be non-decreasing in wait_elapsed and increasing in static_level.

    """

    @property
    def name(self):
        """

        Name of the aging policy

        """
        raise NotImplementedError

    def priority(self, static_level, wait_elapsed):
        """

        Validates the inputs and computes the dynamic priority.

        :param static_level: Base priority of the job. Higher means more urgent.
        :param wait_elapsed: Time the job has been waiting (ms). It can't be negative.

        :return: The dynamic priority

        """
        check_number(static_level, 'static_level')
        check_number(wait_elapsed, 'wait_elapsed')
        if wait_elapsed < 0:
            raise AgingError('wait_elapsed can\'t be negative ({}). Check the clock or the arrival time.'.format(wait_elapsed))
        return self.aging_method(static_level, wait_elapsed)

    @abstractmethod
    def aging_method(self, static_level, wait_elapsed):
        """

        Must return the dynamic priority for already validated inputs.

        """
        raise NotImplementedError('Must be implemented!')

    def __str__(self):
        return self.name


class LinearAging(AgingPolicyBase):
    """

    **Linear aging policy.**

    dynamic_priority = static_level * base_weight + wait_elapsed * static_level / divisor

    Jobs with the same level that have waited longer get a higher priority, and a low level job can overtake a
    higher one after waiting long enough. Jobs with a negative level don't get aging credit, they keep their
    baseline.

    """
    name = 'LINEAR'

    def __init__(self, base_weight=100, divisor=1000):
        """

        Linear aging constructor

        :param base_weight: Weight of the static level. Default 100.
        :param divisor: Normalization of the waiting time. Default 1000 (ms to s).

        """
        check_number(base_weight, 'base_weight')
        check_number(divisor, 'divisor')
        assert(base_weight > 0), 'base_weight must be positive. Received {}'.format(base_weight)
        assert(divisor > 0), 'divisor must be positive. Received {}'.format(divisor)
        self.base_weight = base_weight
        self.divisor = divisor

    def aging_method(self, static_level, wait_elapsed):
        return static_level * self.base_weight + wait_elapsed * max(static_level, 0) / self.divisor

    def crossover_wait(self, low_level, high_level, high_wait=0):
        """

        Waiting time a job of low_level needs to reach the priority of a job of high_level that has waited high_wait.
        Past this time the low level job outranks the other one.

        :param low_level: Level of the waiting job
        :param high_level: Level of the job to be reached
        :param high_wait: Waiting time of the job to be reached

        :return: The waiting time, or None if low_level can never reach it.

        """
        target = self.priority(high_level, high_wait)
        baseline = self.priority(low_level, 0)
        if baseline >= target:
            return 0
        if low_level <= 0:
            return None
        return (target - baseline) * self.divisor / low_level

    def __repr__(self):
        return '{}(base_weight={}, divisor={})'.format(self.__class__.__name__, self.base_weight, self.divisor)
