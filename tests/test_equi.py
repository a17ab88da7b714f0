import pytest

from rcgreedy_sim.equi import Equi


def test_insert_and_delete():
    equi = Equi(4, False)
    equi.insert_job(1)
    assert equi.job_exists(1)
    equi.delete_job(1)
    assert not equi.job_exists(1)


def test_duplicate_insert_raises():
    equi = Equi(4, False)
    equi.insert_job(2)
    with pytest.raises(ValueError):
        equi.insert_job(2)
    assert equi.job_count() == 1


def test_delete_missing_raises():
    equi = Equi(4, False)
    equi.insert_job(2)
    with pytest.raises(KeyError):
        equi.delete_job(3)
    assert equi.job_exists(2)


def test_allocation_sum_whole_servers():
    equi = Equi(6, False)
    for job_id in (1, 2, 3):
        equi.insert_job(job_id)
    total = sum(servers for _, servers in equi.all_allocations())
    assert total == pytest.approx(6.0, abs=1e-6)


def test_partial_allocation():
    equi = Equi(10, True)
    equi.insert_job(1)
    equi.insert_job(2)
    assert equi.allocation(1) == pytest.approx(5.0, abs=1e-6)


def test_large_scale_partial():
    equi = Equi(10000, True)
    for job_id in range(100):
        equi.insert_job(job_id)
    allocs = equi.all_allocations()
    assert len(allocs) == 100
    assert sum(s for _, s in allocs) == pytest.approx(10000.0, abs=1e-3)


def test_fractional_precision():
    equi = Equi(10, True)
    for job_id in (1, 2, 3):
        equi.insert_job(job_id)
    for _, servers in equi.all_allocations():
        assert servers == pytest.approx(10.0 / 3.0, abs=1e-6)


def test_whole_servers_remainder_distribution():
    equi = Equi(7, False)
    for job_id in (10, 20, 30):
        equi.insert_job(job_id)
    allocs = equi.all_allocations()
    assert sorted(s for _, s in allocs) == [2.0, 2.0, 3.0]
    assert sum(s for _, s in allocs) == 7.0


def test_allocation_matches_all_allocations():
    equi = Equi(11, False)
    for job_id in range(4):
        equi.insert_job(job_id)
    for job_id, servers in equi.all_allocations():
        assert equi.allocation(job_id) == servers


def test_empty_scheduler():
    equi = Equi(5, False)
    assert equi.allocation(1) == 0
    assert equi.all_allocations() == []
    assert equi.job_count() == 0


def test_job_count_and_server_count():
    equi = Equi(8, False)
    for job_id in (1, 2, 3):
        equi.insert_job(job_id)
    equi.delete_job(2)
    assert equi.job_count() == 2
    assert equi.server_count == 8
    assert {job_id for job_id, _ in equi.all_allocations()} == {1, 3}


def test_more_jobs_than_servers():
    equi = Equi(2, False)
    for job_id in range(5):
        equi.insert_job(job_id)
    allocs = equi.all_allocations()
    assert sorted(s for _, s in allocs) == [0.0, 0.0, 0.0, 1.0, 1.0]