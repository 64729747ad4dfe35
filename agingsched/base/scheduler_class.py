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

from abc import abstractmethod, ABC
from collections import Counter
from sortedcontainers import SortedKeyList

from agingsched.utils.misc import define_trace_level


class SchedulerError(Exception):
    pass


class SchedulerBase(ABC):
    
    """
    
        This class allows to implement sorting policies over a batch of :class:`agingsched.base.job_class.PriorityJob`.
        A scheduler only orders the jobs, it never ages them. The aging pass must be done before calling
        :func:`schedule`, otherwise the order is computed with the priorities as they were at the last refresh.
        
    """
    
    def __init__(self, **kwargs):
        """
        
        Construct a scheduler
        
        """
        define_trace_level()
        self._counter = 0
        self._logger = logging.getLogger('agingsched')
        
    @property
    def name(self):
        """
        
        Name of the sorting method
        
        """
        raise NotImplementedError 
    
    @abstractmethod
    def get_id(self):
        """
        
        Must return the full ID of the scheduler.
        
        :return: the scheduler's id.
        
        """
        raise NotImplementedError
    
    @abstractmethod
    def scheduling_method(self, jobs):
        """
        
        This function must return the jobs in dispatching order.
            
        :param jobs: Jobs to be sorted
            
        :return: an iterable with the same jobs in the dispatching order
        
        """
        raise Exception('This function must be implemented!!')
            
    def schedule(self, jobs):
        """
        
        Method for schedule. It calls the specific scheduling method.
        
        :param jobs: iterable of jobs (a list or a :class:`agingsched.base.job_class.JobBatch`)
        
        :return: a list with the same jobs, most urgent first.
        
        """
        jobs = list(jobs)
        duplicated = [_id for _id, n in Counter(job.id for job in jobs).items() if n > 1]
        if duplicated:
            raise SchedulerError('Duplicated job ids: {}'.format(duplicated))

        self._counter += 1
        self._logger.debug('Sorting: #{} decision. {} jobs'.format(self._counter, len(jobs)))
        
        to_dispatch = list(self.scheduling_method(jobs))
        self._logger.trace('Sorting: {}'.format(', '.join(str(job.id) for job in to_dispatch)))
        return to_dispatch
    
    def __str__(self):
        return self.get_id()
    
class SimpleHeuristic(SchedulerBase):
    """
    
    Simple scheduler, sorts the jobs depending on the chosen policy.
    
    Sorting as name, sort funct parameters
    
    """

    def __init__(self, name, sorting_parameters, **kwargs):
        SchedulerBase.__init__(self, **kwargs)
        self.name = name
        self.sorting_parameters = sorting_parameters

    def get_id(self):
        """
        
        Returns the full ID of the scheduler.

        :return: the scheduler's id.
        
        """
        return '-'.join([self.__class__.__name__, self.name])

    def scheduling_method(self, jobs):
        """
        
        Sorts the jobs with the sorting parameters of the policy.
        
        :param jobs: Jobs to be sorted
        
        :return: the jobs in dispatching order
        
        """
        return SortedKeyList(jobs, **self.sorting_parameters)

class PriorityAging(SimpleHeuristic):
    """

    **Priority aging policy.** 
    
    Jobs are sorted by dynamic priority in descending order. Equal priorities are broken by ascending id, so the
    order is always the same for the same input.
        
    """
    name = 'PA'
    """ Name of the Scheduler policy. """
    
    sorting_arguments = {
            'key': lambda x: (-x.dynamic_priority, x.id)
        }
    """ This sorting function allows to sort the jobs in relation of the scheduling policy. """

    def __init__(self, **kwargs):
        """
        
        PriorityAging Constructor
        
        """
        SimpleHeuristic.__init__(self, self.name, self.sorting_arguments, **kwargs)
        
class StaticPriority(SimpleHeuristic):
    """
    
    **Static priority policy.**
    
    Jobs are sorted by static level in descending order, ignoring the waiting time. Ties by ascending id.
        
    """
    name = 'SP'
    """ Name of the Scheduler policy. """
    
    sorting_arguments = {
            'key': lambda x: (-x.static_level, x.id)
        }
    """ This sorting function allows to sort the jobs in relation of the scheduling policy. """

    def __init__(self, **kwargs):
        """
        
        StaticPriority Constructor
        
        """
        SimpleHeuristic.__init__(self, self.name, self.sorting_arguments, **kwargs)
        
class FirstInFirstOut(SimpleHeuristic):
    """
    
    **FirstInFirstOut policy.**
    
    Jobs are dispatched in arrival order. Jobs that arrived at the same time keep ascending id order, which is the
    submission order of the payload list.
    
    """
    name = 'FIFO'
    """ Name of the Scheduler policy. """
    
    sorting_arguments = {
            'key': lambda x: (x.arrival_time, x.id)
        }
    """ This sorting function allows to sort the jobs in relation of the scheduling policy. """

    def __init__(self, **kwargs):
        """
    
        FIFO Constructor
    
        """
        SimpleHeuristic.__init__(self, self.name, self.sorting_arguments, **kwargs)
