from courtinvite import scheduler as scheduler_module


def test_scheduler_registers_cleanup_job():
    scheduler = scheduler_module.init_scheduler()
    try:
        status = scheduler_module.get_scheduler_status()
        assert status["status"] == "running"
        assert [job["id"] for job in status["jobs"]] == ["expire_ended_sessions"]
        # A second init returns the running instance
        assert scheduler_module.init_scheduler() is scheduler
    finally:
        scheduler_module.shutdown_scheduler()

    assert scheduler_module.get_scheduler_status() == {"status": "not_initialized", "jobs": []}
