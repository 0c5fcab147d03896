"""prreview - interactive pull request review tool.

Lists the open pull requests of a GitHub repository, checks out the selected
one, installs its dependencies, runs its tests and optionally merges it.
"""

__version__ = "0.1.0"
