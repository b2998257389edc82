from setuptools import find_packages, setup

setup(
  name = 'lss',
  packages = find_packages(where='src'),
  package_dir = {'': 'src'},
  package_data = {'lss.rules': ['default_rules.txt']},
  version = '0.1.0',
  license='GNU',
  description = 'find leaked secrets in a directory tree and in the history of its git repositories',
  keywords = ['secrets', 'credentials', 'git', 'entropy', 'security'],
  python_requires='>=3.11',
  install_requires=[
    "pydantic>=2.0",
    "pydantic-settings>=2.0",
    "PyYAML>=6.0",
    "rich>=13.0",
    "typer>=0.9",
  ],
  extras_require={
    "test": [
      "pytest>=7.0",
    ],
  },
  entry_points={
    "console_scripts": [
      "lss=lss.cli.main:app",
    ],
  },
  classifiers=[
    'Development Status :: 4 - Beta',
    'Intended Audience :: Developers',
    'Topic :: Security',
    'License :: OSI Approved :: GNU General Public License (GPL)',
    'Programming Language :: Python :: 3',
    'Programming Language :: Python :: 3.11',
    'Programming Language :: Python :: 3.12',
  ],
)
