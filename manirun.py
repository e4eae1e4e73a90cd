#! /usr/bin/env python3

# --------------------------------------------------------------------
# Requires Python3 >= 3.10

# --------------------------------------------------------------------
import argparse
import os
import sys

from mani.printer   import Printer
from mani.program   import Session
from mani.reporter  import Reporter
from mani.tools     import Tools

EXIT_COMPILE    = 65
EXIT_NOINPUT    = 66
EXIT_RUNTIME    = 70

# ====================================================================
# Parse command line arguments

def parse_args(argv = None):
    parser = argparse.ArgumentParser(prog = os.path.basename(sys.argv[0]))

    parser.add_argument('script', nargs = '?', help = 'script to run (.mni)')
    parser.add_argument('--ast', action = 'store_true',
                        help = 'print the parsed program instead of running it')

    return parser.parse_args(argv)

# ====================================================================
# Modes

def run_file(path, session, dump_ast = False):
    loaded = Tools(session.reporter).load(path)
    if loaded is None:
        return EXIT_NOINPUT

    source, name = loaded

    if dump_ast:
        statements = session.parse(source, name)
        if statements is None:
            return EXIT_COMPILE
        print(Printer().pformat(statements))
        return 0

    session.run(source, name)

    if session.had_error:
        return EXIT_COMPILE
    if session.had_runtime_error:
        return EXIT_RUNTIME
    return 0

def run_prompt(session, stdin = None):
    stdin = stdin or sys.stdin

    print("The \033[36mMani\033[0m Programming language")

    while True:
        print(">> ", end = "", flush = True)
        line = stdin.readline()

        if not line:
            print()
            return 0
        if line.strip() == "exit":
            return 0

        session.run(line, "REPL")
        session.reset()

# ====================================================================
# Main entry point

def main(argv = None):
    args    = parse_args(argv)
    session = Session(Reporter(), halt_on_error = args.script is not None)

    if args.script is None:
        return run_prompt(session)
    return run_file(args.script, session, dump_ast = args.ast)

# --------------------------------------------------------------------
if __name__ == '__main__':
    sys.exit(main())
