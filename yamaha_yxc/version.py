# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Version of package yamaha_yxc
"""

# import importlib.metadata as _metadata
# __version = _metadata.version(__package__.replace('_','-')) #  e.g., '0.1.0'


# The following line is automatically updated with "semantic-release version"
__version__ =  "0.1.0"


__all__ = [ '__version__' ]
