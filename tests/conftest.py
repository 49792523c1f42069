from pathlib import Path

import pytest

from core.data import DATA_DIR_ENV, clear_cache

ACTIVITIES_CSV = """activity_id,start_time,activity_type,activity_name,distance,duration,calories,avg_hr
1,2024-01-05 07:00:00,running,Morning Run,5000,1800,300,150
,2024-01-05 08:00:00,walking,Orphan,1000,600,50,90
2,2024-01-06 09:30:00,cycling,,20000,3600,500,130
3,,strength_training,Gym,,2700,200,
"""

DAILY_STATS_CSV = """date,steps,resting_hr,min_hr,max_hr
2024-01-05,10000,55,48,160
2024-01-06,8000,,50,150
,5000,60,50,140
"""

SLEEP_CSV = """date,total_sleep_seconds,deep_sleep_seconds,light_sleep_seconds,rem_sleep_seconds,sleep_score
2024-01-05,28800,3600,18000,7200,85
2024-01-06,0,0,0,0,
2024-01-07,,,,,
,25200,3600,14400,7200,80
"""


def write_garmin_files(directory: Path) -> Path:
    (directory / "activities.csv").write_text(ACTIVITIES_CSV)
    (directory / "daily_stats.csv").write_text(DAILY_STATS_CSV)
    (directory / "sleep_data.csv").write_text(SLEEP_CSV)
    return directory


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    write_garmin_files(tmp_path)
    monkeypatch.setenv(DATA_DIR_ENV, str(tmp_path))
    clear_cache()
    yield tmp_path
    clear_cache()


@pytest.fixture
def empty_data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv(DATA_DIR_ENV, str(tmp_path))
    clear_cache()
    yield tmp_path
    clear_cache()
