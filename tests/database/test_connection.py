from src.internship_tracker.internship_tracker.database.connection import DBConfig, DatabaseConnection

SETTINGS = {"host": "db", "user": "tracker", "password": None, "database": "internship_tracker"}


def test_config_from_settings_defaults_port_and_password():
    cfg = DBConfig.from_dict(SETTINGS)

    assert (cfg.port, cfg.password) == (3306, "")


def test_connect_args_can_leave_out_the_database():
    cfg = DBConfig.from_dict(SETTINGS)

    assert cfg.connect_args()["database"] == "internship_tracker"
    assert "database" not in cfg.connect_args(with_database=False)


def test_instance_is_shared_until_the_config_changes():
    first = DatabaseConnection.get_instance(DBConfig.from_dict(SETTINGS))

    assert DatabaseConnection.get_instance(DBConfig.from_dict(SETTINGS)) is first

    other = DatabaseConnection.get_instance(DBConfig.from_dict({**SETTINGS, "database": "other"}))
    assert other is not first
    assert other.config.database == "other"
