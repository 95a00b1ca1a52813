#!/usr/bin/env python
import argparse
import os
import random
import signal
import subprocess
import sys

parser = argparse.ArgumentParser(description="Run the test suite, or some tests")
parser.add_argument('--coverage', "-c", action='store_true',
                    help="Use coverage")
parser.add_argument('--coverage-append', action='store_true',
                    help="Use 'append' with coverage run")
parser.add_argument("--hashseed", action='store',
                    help="Specify the PYTHONHASHSEED to use, otherwise a random one is chosen")

known_args, remaining_args = parser.parse_known_args()

if known_args.coverage_append and not known_args.coverage:
    print("--coverage-append can only be used with --coverage")
    sys.exit(1)

cmd = ["pytest"] + remaining_args

if known_args.coverage:
    cmd_prefix = ["coverage", "run", "--source=labelify"]
    if known_args.coverage_append:
        cmd_prefix.append("--append")
    cmd = cmd_prefix + ["-m"] + cmd

if known_args.hashseed:
    hashseed = known_args.hashseed
else:
    hashseed = os.environ.get('PYTHONHASHSEED', 'random')
    if hashseed == 'random':
        # Choose the seed ourselves, so that it can be printed and a failing
        # run reproduced with --hashseed
        hashseed = str(random.randint(1, 4294967295))

os.environ['PYTHONHASHSEED'] = hashseed
print("PYTHONHASHSEED=%s" % hashseed)
sys.stdout.write(" ".join(cmd) + "\n")

# Ctrl-C should stop the child cleanly and still give a non-zero exit status
SIGINT_RECEIVED = False


def signal_handler(sig, f):
    global SIGINT_RECEIVED
    SIGINT_RECEIVED = True


signal.signal(signal.SIGINT, signal_handler)

retcode = subprocess.call(cmd)
if SIGINT_RECEIVED:
    sys.exit(1)
else:
    sys.exit(retcode)
