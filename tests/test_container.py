from studentscan.container import ServiceContainer


def test_services_are_built_once(qapp, db_path):
    services = ServiceContainer(db_path)
    assert services.db is services.db
    assert services.lookup is services.lookup
    assert services.roster.db is services.db
    assert services.scanner is services.scanner


def test_switch_database_rebuilds_dependents(db_path, tmp_path):
    services = ServiceContainer(db_path)
    old_lookup = services.lookup
    services.db.delete_student("CS001")

    new_db = services.switch_database(tmp_path / "other" / "students.db")

    assert services.db is new_db
    assert services.lookup is not old_lookup
    assert services.lookup.search("CS001").found


def test_close_stops_scanner(qapp, db_path):
    with ServiceContainer(db_path) as services:
        services.scanner.start_listening()
    assert not services.scanner.is_listening
