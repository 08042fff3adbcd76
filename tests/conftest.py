# tests/conftest.py
"""Shared chains and chain-file texts.

The process-registry chains model a registry with up to two spawned
processes and up to two registered names; coverage states are
``(spawned, registered)`` pairs of ``"zero"``/``"one"``/``"two"``.
"""

import pytest

from statemachine_core.markov import STOP, Continue, Markov

ZZ = ("zero", "zero")
OZ = ("one", "zero")
OO = ("one", "one")
TZ = ("two", "zero")
TO = ("two", "one")
TT = ("two", "two")


def label_gen(label):
    """Generator that ignores the model and returns the label."""
    return lambda model: label


def c(label, target):
    return Continue(label, label_gen(label), target)


GOOD_TABLE = {
    ZZ: [(90, c("Spawn", OZ)), (10, c("BadKill", ZZ))],
    OZ: [(30, c("Spawn", TZ)), (40, c("Register", OO)),
         (20, c("Kill", ZZ)), (10, c("BadWhereIs", OZ))],
    OO: [(40, c("Spawn", TO)), (20, c("Unregister", OZ)),
         (10, c("BadUnregister", OO)), (30, c("WhereIs", OO))],
    TZ: [(80, c("Register", TO)), (20, c("Kill", OZ))],
    TO: [(40, c("Register", TT)), (10, c("Kill", OO)),
         (20, c("Unregister", TZ)), (20, c("WhereIs", TO)), (10, STOP)],
    TT: [(30, STOP), (20, c("Unregister", TO)), (30, c("WhereIs", TT)),
         (10, c("BadRegister", TT)), (10, c("BadSpawn", TT))],
}

LINEAR_TABLE = {
    ZZ: [(100, c("Spawn", OZ))],
    OZ: [(100, c("Spawn", TZ))],
    TZ: [(100, c("Register", TO))],
    TO: [(100, c("Register", TT))],
    TT: [(100, STOP)],
}


@pytest.fixture
def good_chain():
    return Markov(GOOD_TABLE)


@pytest.fixture
def linear_chain():
    return Markov(LINEAR_TABLE)


@pytest.fixture
def two_state_chain():
    """``A`` continues to ``B`` or stops; ``B`` always stops."""
    return Markov({
        "A": [(50, c("toB", "B")), (50, STOP)],
        "B": [(100, STOP)],
    })


GOOD_CHAIN_TEXT = """\
; process registry usage model
(chain registry
  (initial (zero zero))
  (state (zero zero)
    (90 "Spawn" (one zero))
    (10 "BadKill" (zero zero)))
  (state (one zero)
    (30 "Spawn" (two zero))
    (40 "Register" (one one))
    (20 "Kill" (zero zero))
    (10 "BadWhereIs" (one zero)))
  (state (one one)
    (40 "Spawn" (two one))
    (20 "Unregister" (one zero))
    (10 "BadUnregister" (one one))
    (30 "WhereIs" (one one)))
  (state (two zero)
    (80 "Register" (two one))
    (20 "Kill" (one zero)))
  (state (two one)
    (40 "Register" (two two))
    (10 "Kill" (one one))
    (20 "Unregister" (two zero))
    (20 "WhereIs" (two one))
    (10 stop))
  (state (two two)
    (30 stop)
    (20 "Unregister" (two one))
    (30 "WhereIs" (two two))
    (10 "BadRegister" (two two))
    (10 "BadSpawn" (two two))))
"""

BAD_CHAIN_TEXT = """\
(chain broken
  (initial s0)
  (state s0 (90 "Go" s1))
  (state s1 (100 "Back" s0)))
"""


@pytest.fixture
def good_chain_text():
    return GOOD_CHAIN_TEXT


@pytest.fixture
def good_chain_file(tmp_path):
    path = tmp_path / "registry.mcsl"
    path.write_text(GOOD_CHAIN_TEXT, encoding="utf-8")
    return path


@pytest.fixture
def bad_chain_file(tmp_path):
    path = tmp_path / "broken.mcsl"
    path.write_text(BAD_CHAIN_TEXT, encoding="utf-8")
    return path
