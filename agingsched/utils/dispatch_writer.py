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

from agingsched.utils.file import file_exists
from agingsched.utils.misc import DEFAULT_BROKER, pprint_header, pprint_task


class DispatchWriter(ABC):
    
    def __init__(self, path, overwrite=False, append=False):
        """
        Abstract class used to write the dispatching order of a batch.

        :param path: Path to the target file
        :param overwrite: If True, any existing files with the same name will be overwritten
        :param append: If True, the new lines will be appended to a file with the same name, if it exists
        """
        if overwrite and append:
            raise Exception('Only one mode (append or overwrite) can be True. ')
        exists = file_exists(path, True)
        if exists and not (overwrite or append):
            raise Exception('File already exists. Overwrite option is False. Set True to overwrite or change the filename/filepath.')
        
        mode = 'w'
        if append:
            mode = 'a'
        self.file = open(path, mode)
        
    def add_newline(self, job):
        """
        Writes a new line corresponding to a job

        :param job: The job to be written
        """
        self._write(self.process_job(job))

    def add_header(self):
        """
        Writes the header line, if the format has one
        """
        header = self.header()
        if header:
            self._write(header)

    def write_jobs(self, jobs):
        """
        Writes the header and one line per job, in the given order

        :param jobs: Iterable of jobs
        """
        self.add_header()
        for job in jobs:
            self.add_newline(job)

    def _write(self, line):
        if not line.endswith('\n'):
            line += '\n'
        self.file.write(line)

    def header(self):
        return None

    @abstractmethod
    def process_job(self, job):
        """
        This method must convert the job to a string formatted in a specific way, according to the implementation

        :param job: A job
        :return: The string corresponding to the job
        """
        raise NotImplementedError()
    
    def close_file(self):
        """
        Closes the output file stream
        """
        if not self.file.closed:
            self.file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close_file()
    
    def __del__(self):
        """
        If present, closes the file stream.
        """
        if hasattr(self, 'file'):
            self.close_file()


class PPrintWriter(DispatchWriter):
    """
    Writes the task table: index, static level, dynamic priority and waiting time of each job.
    """

    def __init__(self, path, output_format=None, overwrite=False, append=False):
        """
        :param path: Path of the target file
        :param output_format: Dictionary as PPRINT_TASK_OUTPUT. The default one is used if it is not given.
        :param overwrite: If True, any existing files with the same name will be overwritten
        :param append: If True, the new lines will be appended to a file with the same name, if it exists
        """
        DispatchWriter.__init__(self, path, overwrite, append)
        self.output_format = output_format or DEFAULT_BROKER['PPRINT_TASK_OUTPUT']

    def header(self):
        return pprint_header(self.output_format)

    def process_job(self, job):
        return pprint_task(job, self.output_format)
