from .__version__ import NAGERU_VERSION

__version__ = NAGERU_VERSION
