"""Uses the Minimus lexer, parser and interpreter to run program files or to run in command-line mode. Also uses the
error handling context manager. Installed as the `minimus` console script.
"""

import argparse

from minimus.lang.error import ErrorHandler
from minimus.lang.lexical import Lexer
from minimus.lang.session import Session
from minimus.lang.shell import Shell
from minimus.lang.syntax import Parser


def main(argv=None):
    """Runs Minimus interpreter. Called from the minimus console script."""
    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(prog="minimus", description="Minimus 1.0 interpreter")
        parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
        parser.add_argument("--ast", help="display the syntax tree before running", action="store_true")
        parser.add_argument("--tokens", help="display the token stream and exit", action="store_true")
        parser.add_argument("--nesting-limit", help="maximum statement/expression nesting depth", type=int,
                            default=Parser.NESTING_LIMIT)
        args = parser.parse_args(argv)

        if args.file is not None and args.tokens:
            error_handler.register_file(args.file)
            source = Session.read(args.file)
            error_handler.register_line(args.file, source)

            for token in Lexer(source):
                print(repr(token))

        elif args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, nesting_limit=args.nesting_limit)
            if args.ast:
                for __, tree in sess.to_exec.values():
                    print(tree.display())

            sess.run()

            for execution in sess.results:
                print(f"Execution result: {execution.value}")

        else:
            sess = Session(error_handler, Session.SH_FILE, cmd_line=True, nesting_limit=args.nesting_limit)
            Shell(sess).cmdloop()

    return 0


if __name__ == "__main__":
    main()
