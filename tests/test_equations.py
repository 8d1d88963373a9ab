import threading

from returns.maybe import Nothing, Some
from returns.result import Failure, Success

from gravtensor.equations import (
    CoefficientCache,
    CoefficientKey,
    CoefficientState,
    ComputationError,
    Equation,
    EquationError,
    EquationSystem,
    generate_coefficient,
)
from gravtensor.expression import NonlinearExpressionError
from gravtensor.generator import InvalidSubstitutionError
from gravtensor.language import LineError, parse_equation

lam = CoefficientKey("lambda", 0, 0, 2, 0)
xi = CoefficientKey("xi", 0, 0, 2, 0)


class CountingGenerator:
    def __init__(self):
        self.lock = threading.Lock()
        self.calls = []

    def __call__(self, key):
        with self.lock:
            self.calls.append(key)
        return generate_coefficient(key)


def failing_generator(key):
    raise ValueError(f"cannot generate {key.name}")


def test_generate_coefficient_names_variables_after_key():
    tensor = generate_coefficient(lam)

    assert tensor.deparse() == "lambda_1 * \\gamma_{ab}"


def test_cache_has_one_entry_per_key():
    with CoefficientCache() as cache:
        first = cache.get(lam)
        second = cache.get(CoefficientKey("lambda", 0, 0, 2, 0))

        assert first is second
        assert len(cache) == 1
        assert lam in cache
        assert xi not in cache
        assert first.state is CoefficientState.pending


def test_entry_runs_at_most_once():
    generate = CountingGenerator()
    with CoefficientCache(generate) as cache:
        entry = cache.get(lam)
        started = [entry.start(), entry.start()]

        outcome = entry.wait()

        assert started == [True, False]
        assert not entry.start()
        assert entry.state is CoefficientState.done
        assert entry.settled
        assert outcome.unwrap().deparse() == "lambda_1 * \\gamma_{ab}"
        assert entry.wait() is outcome
        assert generate.calls == [lam]


def test_concurrent_requests_generate_once():
    generate = CountingGenerator()
    barrier = threading.Barrier(8)

    with CoefficientCache(generate, max_workers=4) as cache:

        def request():
            barrier.wait()
            cache.request(CoefficientKey("lambda", 0, 0, 2, 0)).wait()

        threads = [threading.Thread(target=request) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert generate.calls == [lam]
        assert len(cache) == 1


def test_wait_starts_pending_entry():
    with CoefficientCache() as cache:
        entry = cache.get(xi)

        assert isinstance(entry.wait(), Success)


def test_request_starts_entry():
    generate = CountingGenerator()
    with CoefficientCache(generate) as cache:
        entry = cache.request(lam)

        assert entry.state is not CoefficientState.pending
        entry.wait()
        cache.request(lam)
        assert generate.calls == [lam]


def test_start_all():
    generate = CountingGenerator()
    with CoefficientCache(generate, max_workers=2) as cache:
        cache.get(lam)
        cache.request(xi)

        assert cache.start_all() == 1
        assert cache.start_all() == 0
        for entry in cache:
            entry.wait()
        assert sorted(key.name for key in generate.calls) == ["lambda", "xi"]


def test_failure_is_sticky():
    with CoefficientCache(failing_generator) as cache:
        entry = cache.get(lam)

        outcome = entry.wait()
        error = outcome.failure()

        assert isinstance(error, ComputationError)
        assert error.key == lam
        assert isinstance(error.cause, ValueError)
        assert str(error).startswith("Expected coefficient #<lambda:0:0:2:0> to be generated")
        assert entry.state is CoefficientState.error
        assert not entry.start()
        assert entry.wait() is outcome


def test_peek():
    with CoefficientCache() as cache:
        entry = cache.get(lam)

        assert entry.peek() == Nothing
        tensor = entry.wait().unwrap()
        assert entry.peek() == Some(tensor)


def test_peek_failed_entry():
    with CoefficientCache(failing_generator) as cache:
        entry = cache.get(lam)
        entry.wait()

        assert entry.peek() == Nothing


def test_observers_are_told_once():
    told = threading.Event()
    seen = []

    def observer(entry):
        seen.append(entry)
        told.set()

    with CoefficientCache() as cache:
        entry = cache.get(lam)
        entry.add_observer(observer)
        entry.start()

        assert told.wait(timeout=60)
        entry.add_observer(seen.append)
        assert seen == [entry, entry]


def make_equation(cache, source):
    expression = parse_equation(source).unwrap()
    entries = {key: cache.get(key) for key in expression.coefficients()}
    return Equation(source, expression, entries)


def test_equation_evaluates_once():
    with CoefficientCache() as cache:
        equation = make_equation(cache, "#<lambda:0:0:2:0> - #<xi:0:0:2:0>")

        outcome = equation.wait()

        assert equation.coefficients == (lam, xi)
        assert outcome.unwrap().deparse() == "lambda_1 * \\gamma_{ab} - xi_1 * \\gamma_{ab}"
        assert equation.wait() is outcome


def test_equation_fails_without_waiting_for_other_coefficients():
    release = threading.Event()
    broken = CoefficientKey("broken", 0, 0, 2, 0)

    def generate(key):
        if key == broken:
            raise ValueError("no tensor")
        release.wait()
        return generate_coefficient(key)

    with CoefficientCache(generate, max_workers=2) as cache:
        try:
            equation = make_equation(cache, "#<lambda:0:0:2:0> - #<broken:0:0:2:0>")

            error = equation.wait().failure()

            assert isinstance(error, ComputationError)
            assert error.key == broken
            assert cache.get(lam).state is CoefficientState.running
        finally:
            release.set()


def test_equation_waits_for_every_coefficient():
    release = threading.Event()

    def generate(key):
        if key == xi:
            release.wait()
        return generate_coefficient(key)

    with CoefficientCache(generate, max_workers=2) as cache:
        equation = make_equation(cache, "#<lambda:0:0:2:0> - #<xi:0:0:2:0>")
        outcomes = []
        waiter = threading.Thread(target=lambda: outcomes.append(equation.wait()))
        try:
            waiter.start()

            assert cache.get(lam).wait().unwrap().deparse() == "lambda_1 * \\gamma_{ab}"
            waiter.join(timeout=0.2)
            assert waiter.is_alive()
            assert outcomes == []
        finally:
            release.set()

        waiter.join(timeout=60)
        assert not waiter.is_alive()
        assert outcomes[0].unwrap().deparse() == "lambda_1 * \\gamma_{ab} - xi_1 * \\gamma_{ab}"


def test_equation_after_shutdown():
    cache = CoefficientCache()
    equation = make_equation(cache, "#<lambda:0:0:2:0> - #<xi:0:0:2:0>")
    cache.shutdown()

    error = equation.wait().failure()

    assert isinstance(error, ComputationError)
    assert error.key == lam
    assert isinstance(error.cause, RuntimeError)


def test_equation_evaluation_error():
    with CoefficientCache() as cache:
        equation = make_equation(cache, "#<lambda:0:0:2:0> + Gamma({cd})")

        error = equation.wait().failure()

        assert isinstance(error, EquationError)
        assert error.source == "#<lambda:0:0:2:0> + Gamma({cd})"


def test_equation_without_coefficients():
    with CoefficientCache() as cache:
        equation = make_equation(cache, "Gamma({ab}) - Gamma({ba})")

        assert equation.wait().unwrap().deparse() == "\\gamma_{ab} - \\gamma_{ba}"


def test_solve():
    with EquationSystem() as system:
        system.load("#<lambda:0:0:2:0> - #<xi:0:0:2:0>").unwrap()

        solution = system.solve().unwrap()

        assert solution.substitution.deparse() == "lambda_1 = xi_1\n"
        assert solution.deparse() == (
            "#<lambda:0:0:2:0> = xi_1 * \\gamma_{ab}\n#<xi:0:0:2:0> = xi_1 * \\gamma_{ab}\n"
        )


def test_solve_chained_equations():
    text = "#<a:0:0:2:0> - 2 * #<b:0:0:2:0>\n#<b:0:0:2:0> - #<c:0:0:2:0>\n"
    with EquationSystem(max_workers=2) as system:
        equations = system.load(text).unwrap()

        solution = system.solve().unwrap()

        assert len(equations) == 2
        assert len(system.cache) == 3
        assert solution.substitution.deparse() == "a_1 = 2 * c_1\nb_1 = c_1\n"
        assert solution.deparse() == (
            "#<a:0:0:2:0> = 2 * c_1 * \\gamma_{ab}\n"
            "#<b:0:0:2:0> = c_1 * \\gamma_{ab}\n"
            "#<c:0:0:2:0> = c_1 * \\gamma_{ab}\n"
        )


def test_solve_shared_cache():
    generate = CountingGenerator()
    with CoefficientCache(generate) as cache:
        system = EquationSystem(cache)
        system.add(parse_equation("#<lambda:0:0:2:0> - #<xi:0:0:2:0>").unwrap())
        system.add(parse_equation("2 * #<xi:0:0:2:0:{ba}> - 2 * #<lambda:0:0:2:0>").unwrap())

        assert isinstance(system.solve(), Success)
        assert sorted(key.name for key in generate.calls) == ["lambda", "xi"]
        assert system.equations[1].source == "2 * #<xi:0:0:2:0:{ba}> - 2 * #<lambda:0:0:2:0:{ab}>"


def test_solve_without_equations():
    with EquationSystem() as system:
        solution = system.solve().unwrap()

        assert solution.deparse() == ""


def test_solve_inconsistent_equation():
    with EquationSystem() as system:
        system.load("#<lambda:0:0:2:0> - #<lambda:0:0:2:0> + Gamma({ab})").unwrap()

        assert isinstance(system.solve().failure(), InvalidSubstitutionError)


def test_solve_nonlinear_equation():
    with EquationSystem() as system:
        system.load("#<lambda:0:0:0:0> * #<lambda:0:0:2:0>").unwrap()

        assert isinstance(system.solve().failure(), NonlinearExpressionError)


def test_solve_generation_failure():
    with EquationSystem(CoefficientCache(failing_generator)) as system:
        system.load("#<lambda:0:0:2:0>").unwrap()

        match system.solve():
            case Failure(ComputationError(key=key)):
                assert key == lam
            case other:
                raise AssertionError(f"Unexpected outcome {other}")


def test_solve_evaluation_error():
    with EquationSystem() as system:
        system.load("#<lambda:0:0:2:0> + Gamma({abc})").unwrap()

        assert isinstance(system.solve().failure(), EquationError)


def test_load_error():
    with EquationSystem() as system:
        error = system.load("#<lambda:0:0:2:0>\n#<xi:0:0:2:0> +").failure()

        assert isinstance(error, LineError)
        assert error.line == 2
        assert len(system.equations) == 0


def test_solve_trace():
    with EquationSystem() as system:
        system.load("#<a:0:0:0:0> - Gamma({aa})").unwrap()

        solution = system.solve().unwrap()

        assert solution.substitution.deparse() == "a_1 = 3\n"
