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


class ExecutionEngine(ABC):
    """

    Interface of the external execution engine (e.g. a CloudSim broker). The engine receives the whole ordered batch
    in a single call and returns the completed payloads once the execution finishes. The results are not
    interpreted by this package.

    """

    @property
    def name(self):
        """

        Name of the engine

        """
        return self.__class__.__name__

    @abstractmethod
    def submit_batch(self, payloads):
        """

        Submits the ordered payloads for execution.

        :param payloads: List of payloads in dispatching order

        :return: The completed payloads, with the status, vm/host ids and timing metrics recorded by the engine.

        """
        raise NotImplementedError('Must be implemented!')

    def __str__(self):
        return self.name
