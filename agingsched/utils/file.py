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
from os import makedirs as _makedir
from os.path import isfile as _isfile, isdir as _isdir
from json import dump as _dump


def file_exists(file_path, boolean=False, raise_error=False, head_message=''):
    """

    :param file_path: Path to the file
    :param boolean: Return a boolean instead of the path
    :param raise_error: Raise an exception if the file does not exist
    :param head_message: Prefix of the exception message
    :return: The path or a boolean

    """
    exists = _isfile(file_path)
    if (raise_error or head_message != '') and not exists:
        raise Exception('{}{} File does not exist.'.format(head_message, file_path))
    if boolean:
        return exists
    return file_path


def dir_exists(dir_path, create=False):
    """

    :param dir_path: Path to the directory
    :param create: Create the directory (and its parents) if it does not exist
    :return: True if the directory exists or it was created

    """
    exists = _isdir(dir_path)
    if create and not exists:
        _makedir(dir_path)
        return True
    return exists


def save_jsonfile(filepath, _dict, **kwargs):
    """
    
    Saves a json file.
    
    :param filepath: Filepath of the target file
    :param _dict: Data to be saved
    :param **kwargs: Extra arguments of json.dump
    
    """
    with open(filepath, 'w') as file:
        _dump(_dict, file, **kwargs)

