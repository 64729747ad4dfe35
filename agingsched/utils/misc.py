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

from os import path as _path, remove as _remove
from json import dump as _dump, load as _load
from time import time as _time
from collections.abc import Mapping

# ===============================================================================
# Default broker parameters
# ===============================================================================
#
# * BASE_WEIGHT: Weight of the static level. It keeps the static level dominant among fresh jobs.
# * AGING_DIVISOR: Divisor of the waiting time. Converts milliseconds to a comparable unit.
# * RESULTS_FOLDER_PATH: Folder where the output files will be written.
# * BATCH_NAME: Name of the batch, used as suffix of the output files.
# * PPRINT_PREFIX: Prefix of the task table file.
# * BENCHMARK_PREFIX: Prefix of the benchmark file.
# * PPRINT_TASK_OUTPUT: Format of the task table (human readable version).
# * LOG_LEVEL: INFO, DEBUG or TRACE.
#
DEFAULT_BROKER = {
    "BASE_WEIGHT": 100,
    "AGING_DIVISOR": 1000,
    "RESULTS_FOLDER_PATH": "results/",
    "BATCH_NAME": "batch",
    "PPRINT_PREFIX": "pprint-",
    "BENCHMARK_PREFIX": "bench-",
    "PPRINT_TASK_OUTPUT": {
        "header_format": "{:<17}{:<17}{:<17}{:<17}",
        "format": "{:<17}{:<17}{:<17.2f}{:<17}",
        "header": ["Cloudlet Index", "Priority Level", "Priority Value", "Time Elapsed"],
        "order": ["job_id", "static_level", "dynamic_priority", "wait_elapsed"],
        "attributes": {
            "job_id": "id",
            "static_level": "static_level",
            "dynamic_priority": "dynamic_priority",
            "wait_elapsed": "wait_elapsed"
        }
    },
    "LOG_LEVEL": "INFO"
}


def current_time_millis():
    """

    Current unix time in milliseconds.

    """
    return _time() * 1000


def define_trace_level():
    """

    Registers the TRACE level (DEBUG - 5) and the trace method of the loggers. It can be called many times.

    """
    level = logging.TRACE = logging.DEBUG - 5

    def log_logger(self, message, *args, **kwargs):
        if self.isEnabledFor(level):
            self._log(level, message, args, **kwargs)

    def log_root(msg, *args, **kwargs):
        logging.log(level, msg, *args, **kwargs)

    logging.addLevelName(level, "TRACE")
    logging.getLoggerClass().trace = log_logger
    logging.trace = log_root
    return level


def generate_config(config_fp, **kwargs):
    """
    
    Creates a config file.
    
    :param config_fp: Filepath to the config
    :param **kwargs: Source for the config data  
    
    """
    _local = {}
    for k, v in kwargs.items():
        _local[k] = v
    with open(config_fp, 'w') as c:
        _dump(_local, c, indent=2)


def hinted_tuple_hook(obj):
    """
    
    Decoder for specific object of json files, for preserving the type of the object.
    It's used with the json.load function.
    
    """
    if '__tuple__' in obj:
        return tuple(obj['items'])
    return obj


def load_config(config_fp):
    """
    
    Loads an specific config file in json format
    
    :param config_fp: Filepath of the config file.
    
    :return: Dictionary with the configuration. 
    
    """
    with open(config_fp) as c:
        return _load(c, object_hook=hinted_tuple_hook)


def clean_results(*args):
    """

    Removes the filepaths passed as argument

    :param *args: List of filepaths 

    """
    for fp in args:
        if _path.isfile(fp):
            _remove(fp)


def pprint_header(output_format):
    """

    Header of the task table.

    :param output_format: Dictionary as PPRINT_TASK_OUTPUT

    """
    return output_format['header_format'].format(*output_format['header'])


def pprint_task(job, output_format):
    """

    One row of the task table.

    :param job: A :class:`agingsched.base.job_class.PriorityJob`
    :param output_format: Dictionary as PPRINT_TASK_OUTPUT

    """
    attributes = output_format['attributes']
    values = [getattr(job, attributes[name]) for name in output_format['order']]
    return output_format['format'].format(*values)


class FrozenDict(Mapping):
    """

    Inmutable dictionary useful for storing parameters that are dinamycally loaded

    """

    def __init__(self, *args, **kwargs):
        self._d = dict(*args, **kwargs)
        self._hash = None

    def __iter__(self):
        return iter(self._d)

    def __len__(self):
        return len(self._d)

    def __getitem__(self, key):
        return self._d[key]

    def __getattr__(self, key):
        try:
            return self.__dict__['_d'][key]
        except KeyError:
            raise AttributeError(key)

    def __hash__(self):
        if self._hash is None:
            self._hash = 0
            for k in self._d:
                self._hash ^= hash(k)
        return self._hash

    def __str__(self):
        return str(self._d)
