import sys
import time

from .runtime   import Environment, NativeError, NativeFunction
from .tools     import file_exists

### NATIVE FUNCTIONS ###

# installed into the global environment of every interpreter
# each takes the calling interpreter first, then the Mani arguments

def clock(interpreter):
    return time.time()

def read_line(interpreter):
    line = (interpreter.stdin or sys.stdin).readline()
    if line == "":
        return None
    return line.rstrip("\r\n")

def length(interpreter, value):
    if not isinstance(value, (str, list)):
        raise NativeError("len() expects a string or an array.")
    return float(len(value))

def exists(interpreter, name):
    if not isinstance(name, str):
        raise NativeError("fileExists() expects a file name.")
    return file_exists(name)

NATIVES = (
    NativeFunction("clock",         0, clock),
    NativeFunction("input",         0, read_line),
    NativeFunction("len",           1, length),
    NativeFunction("fileExists",    1, exists),
)

def install(env: Environment):
    for native in NATIVES:
        env.define(native.name, native)
