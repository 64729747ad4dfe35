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

from collections.abc import Mapping


class DispatchError(LookupError):
    pass


def payload_mapping(payloads, key=None):
    """

    Builds the id -> payload mapping used by the :class:`.Dispatcher`.

    :param payloads: A mapping (used as is), or a sequence of payloads.
    :param key: Optional. Callable that returns the id of a payload. If it is not given, the position of the payload
        in the sequence is its id.

    :return: A dictionary id -> payload

    """
    if isinstance(payloads, Mapping):
        assert(key is None), 'key is only used with sequences of payloads.'
        return payloads
    if key is None:
        return dict(enumerate(payloads))
    _mapping = {}
    for payload in payloads:
        _id = key(payload)
        if _id in _mapping:
            raise DispatchError('Payload id {} is duplicated.'.format(_id))
        _mapping[_id] = payload
    return _mapping


class Dispatcher:
    """

    Translates the sorted jobs into the submission order of their payloads. The payloads are only referenced, they
    are handed to the engine as they are. Nothing is filtered, deduplicated or aged here.

    """

    def __init__(self):
        self._logger = logging.getLogger('agingsched')

    def sequence(self, sorted_jobs, payloads):
        """

        Returns the payloads in the order of the sorted jobs. Position i of the result is the payload whose id is
        the id of sorted_jobs[i].

        :param sorted_jobs: Jobs in dispatching order
        :param payloads: Mapping id -> payload

        :return: List of payloads

        """
        sorted_jobs = list(sorted_jobs)
        self.check_alignment(sorted_jobs, payloads)
        return [payloads[job.id] for job in sorted_jobs]

    def check_alignment(self, sorted_jobs, payloads):
        """

        Verifies the 1:1 correspondence between jobs and payloads. A misaligned batch comes from an assembly error,
        so the whole batch is refused.

        :raises DispatchError: if a job has no payload, a payload has no job or a job id appears twice.

        """
        ids = [job.id for job in sorted_jobs]
        seen = set()
        duplicated = []
        for _id in ids:
            if _id in seen:
                duplicated.append(_id)
            seen.add(_id)
        if duplicated:
            self._logger.error('Dispatch aborted. Duplicated job ids {}'.format(duplicated))
            raise DispatchError('Duplicated job ids: {}'.format(duplicated))

        missing = [_id for _id in ids if _id not in payloads]
        if missing:
            self._logger.error('Dispatch aborted. Jobs without payload: {}'.format(missing))
            raise DispatchError('No payload for job ids: {}'.format(missing))

        orphans = [_id for _id in payloads if _id not in seen]
        if orphans:
            self._logger.error('Dispatch aborted. Payloads without job: {}'.format(orphans))
            raise DispatchError('No job for payload ids: {}'.format(orphans))
