# "plyra" is a pkgutil-style namespace package: plyra-restore installs
# plyra.restore here alongside any other plyra-* distribution.
from pkgutil import extend_path

__path__ = extend_path(__path__, __name__)
