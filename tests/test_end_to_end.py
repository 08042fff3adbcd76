# tests/test_end_to_end.py
"""A process-registry model driven by the chain, the logic and GenSym.

The registry allows two spawned processes and two registered names.  The
chain's coverage state counts ``(spawned, registered)``; the generators
produce commands with symbolic process references; a small interpreter
checks each command's precondition with a formula.
"""

import pytest

from statemachine_core import (
    STOP,
    Continue,
    GenSym,
    Markov,
    annotate,
    boolean,
    elem,
    evaluate,
    le,
    ne,
    not_elem,
    seeded_draw,
    validate,
    walk,
)

COUNT = {"zero": 0, "one": 1, "two": 2}
NAMES = ("a", "b")


class Model:
    """Spawned process references and the names registered to them."""

    def __init__(self):
        self.gensym = GenSym()
        self.pids = []
        self.registered = {}


def spawn(model):
    return ("spawn", model.gensym.gen_sym())


def register(model):
    free = [n for n in NAMES if n not in model.registered]
    pid = next(p for p in model.pids if p not in model.registered.values())
    return ("register", free[0], pid)


def unregister(model):
    return ("unregister", sorted(model.registered)[-1])


def next_model(model, command):
    if command[0] == "spawn":
        model.pids.append(command[1])
    elif command[0] == "register":
        model.registered[command[1]] = command[2]
    elif command[0] == "unregister":
        del model.registered[command[1]]
    return model


def precondition(model, command):
    if command[0] == "spawn":
        return annotate(le(len(model.pids), 1), "room for a process")
    if command[0] == "register":
        _, name, pid = command
        return (annotate(not_elem(name, list(model.registered)), "name free")
                & annotate(elem(pid, model.pids), "pid spawned"))
    _, name = command
    return annotate(elem(name, list(model.registered)), "name registered")


ZZ, OZ, TZ = ("zero", "zero"), ("one", "zero"), ("two", "zero")
TO, TT = ("two", "one"), ("two", "two")

REGISTRY = Markov({
    ZZ: [(100, Continue("Spawn", spawn, OZ))],
    OZ: [(70, Continue("Spawn", spawn, TZ)), (30, STOP)],
    TZ: [(60, Continue("Register", register, TO)), (40, STOP)],
    TO: [(50, Continue("Register", register, TT)),
         (25, Continue("Unregister", unregister, TZ)), (25, STOP)],
    TT: [(40, Continue("Unregister", unregister, TO)), (60, STOP)],
})


class TestProcessRegistry:

    def test_chain_is_valid(self):
        assert validate(REGISTRY, ZZ) == []

    @pytest.mark.parametrize("seed", range(20))
    def test_generated_commands_satisfy_preconditions(self, seed):
        checker = Model()

        def check(model, command):
            assert boolean(precondition(checker, command)), command
            next_model(checker, command)
            return next_model(model, command)

        commands = walk(REGISTRY, ZZ, Model(), seeded_draw(seed),
                        next_model=check)
        assert commands[0][0] == "spawn"
        spawned = [c[1] for c in commands if c[0] == "spawn"]
        assert len(set(spawned)) == len(spawned)

    def test_bad_register_explained(self):
        model = Model()
        next_model(model, spawn(model))
        ref = model.pids[0]
        next_model(model, ("register", "a", ref))
        value = evaluate(precondition(model, ("register", "a", ref)))
        assert not value.is_true
        assert value.counterexample.pretty() == (
            "and: left side failed\n"
            "  label: name free\n"
            "    expected: 'a' in ['a']"
        )

    def test_symbolic_refs_distinct_in_formulas(self):
        gs = GenSym()
        p0, p1 = gs.gen_sym(), gs.gen_sym()
        assert boolean(ne(p0, p1))
