#!/usr/bin/env python

"""Setup script for packaging sheetcalc.

To release:
    Update /src/sheetcalc/version.py, /CHANGES.rst

Run tests with:
    pytest

To build a package for distribution:
    python setup.py sdist bdist_wheel

and upload it to the PyPI with:
    twine upload --verbose dist/*

to install a link for development work:
    pip install -e .[test]

"""

from setuptools import find_packages, setup

# see StackOverflow/458550
exec(open('src/sheetcalc/version.py').read())


# Create long description from README.rst and CHANGES.rst.
# PYPI page will contain complete changelog.
def changes():
    """get changes.rst and remove the keep-a-changelog header"""
    import itertools as it
    import re

    lines = tuple(open('CHANGES.rst', 'r', encoding='utf-8').readlines())
    first_change_re = re.compile(r'^\[\d')
    header = tuple(it.takewhile(lambda line: not first_change_re.match(line), lines))
    return lines[len(header):]


long_description = u'{}\n\nChange Log\n==========\n\n{}'.format(
    open('README.rst', 'r', encoding='utf-8').read(), ''.join(changes()))

with open('test-requirements.txt') as f:
    tests_require = [line.strip() for line in f if line.strip()]


setup(
    name='sheetcalc',
    version=__version__,  # noqa: F821
    packages=find_packages('src'),
    package_dir={'': 'src'},
    description='Evaluate csv spreadsheets of arithmetic cell expressions '
                'with cell references & circular reference detection',
    keywords='spreadsheet csv formula parser',
    extras_require={
        'test': tests_require,
    },
    install_requires=[
        'networkx>=2.0',
        'numpy',
        'openpyxl>=2.6.2',
        'ruamel.yaml',
    ],
    entry_points={
        'console_scripts': [
            'sheetcalc = sheetcalc.cli:main',
        ],
    },
    python_requires='>=3.7',
    long_description=long_description,
    long_description_content_type='text/x-rst',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: GNU General Public License v3 (GPLv3)',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Office/Business :: Financial :: Spreadsheet',
        'Topic :: Software Development :: Libraries :: Python Modules',
    ],
)
