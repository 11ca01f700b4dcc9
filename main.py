import sys
from datetime import timedelta

from rich.pretty import pprint

from runeflag import *

flags = commandline()
verbose = flags.boolean("v", False, "print the parsed state")
count = flags.integer("c", 2, "number of `rounds` to run")
wait = flags.duration("w", timedelta(), "pause between rounds")


if __name__ == '__main__':
    flags.parse(sys.argv[1:])
    if verbose.get():
        pprint(flags)
    print(count.get(), wait.get(), flags.args)
