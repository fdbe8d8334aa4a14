from lms_quiz.core.seeded_random import SeededRandom, build_seed, seed_hash, seeded_shuffle


def test_seed_hash_known_values():
    assert seed_hash("") == 0
    assert seed_hash("a") == 97
    assert seed_hash("ab") == 97 * 31 + 98


def test_seed_hash_uses_utf16_code_units():
    # 서로게이트 쌍(0xD83D, 0xDE00)이 두 유닛으로 계산되어야 함
    assert seed_hash("\U0001F600") == 0xD83D * 31 + 0xDE00


def test_seed_hash_wraps_to_int32():
    seeds = [f"user-{i}-quiz-{i * 7}-default" for i in range(50)]
    hashes = [seed_hash(s) for s in seeds]
    assert all(-(2 ** 31) <= h < 2 ** 31 for h in hashes)
    assert any(h < 0 for h in hashes)


def test_first_value_matches_lcg_step():
    rng = SeededRandom("a")
    assert rng() == ((97 * 9301 + 49297) % 233280) / 233280


def test_values_stay_in_unit_interval_for_negative_hashes():
    seeds = [f"user-{i}-quiz-{i * 7}-default" for i in range(50)]
    for s in seeds:
        rng = SeededRandom(s)
        for _ in range(20):
            v = rng()
            assert 0.0 <= v < 1.0


def test_same_seed_same_sequence():
    a = SeededRandom("42-7-default")
    b = SeededRandom("42-7-default")
    assert [a() for _ in range(10)] == [b() for _ in range(10)]


def test_shuffle_is_deterministic_permutation():
    items = list(range(20))
    first = seeded_shuffle(items, SeededRandom("5-3-morning"))
    second = seeded_shuffle(items, SeededRandom("5-3-morning"))
    assert first == second
    assert sorted(first) == items
    # 원본은 그대로
    assert items == list(range(20))


def test_different_seeds_usually_differ():
    items = list(range(20))
    results = {tuple(seeded_shuffle(items, SeededRandom(f"u-1-{k}"))) for k in range(5)}
    assert len(results) > 1


def test_shuffle_trivial_inputs():
    rng = SeededRandom("x")
    assert seeded_shuffle([], rng) == []
    assert seeded_shuffle(["only"], rng) == ["only"]


def test_build_seed_identity_precedence():
    assert build_seed(7, user_id=42) == "42-7-default"
    assert build_seed(7, user_id=42, client_host="10.0.0.1", sub_seed="retry") == "42-7-retry"
    assert build_seed(7, client_host="10.0.0.1") == "10.0.0.1-7-default"
    assert build_seed(7) == "anonymous-7-default"
    assert build_seed(7, sub_seed="") == "anonymous-7-default"
