"""Built-in region list offered when the config names none."""

from umbrella.config.schema import RegionConfig

DEFAULT_REGIONS: list[RegionConfig] = [
    RegionConfig(name="Seoul", latitude=37.5665, longitude=126.9780),
    RegionConfig(name="Busan", latitude=35.1796, longitude=129.0756),
    RegionConfig(name="Daegu", latitude=35.8722, longitude=128.6025),
    RegionConfig(name="Incheon", latitude=37.4563, longitude=126.7052),
    RegionConfig(name="Gwangju", latitude=35.1595, longitude=126.8526),
    RegionConfig(name="Daejeon", latitude=36.3504, longitude=127.3845),
    RegionConfig(name="Ulsan", latitude=35.5384, longitude=129.3114),
    RegionConfig(name="Jeju", latitude=33.4996, longitude=126.5312),
    RegionConfig(name="Suwon", latitude=37.2636, longitude=127.0286),
    RegionConfig(name="Changwon", latitude=35.2281, longitude=128.6811),
    RegionConfig(name="Goyang", latitude=37.6584, longitude=126.8320),
    RegionConfig(name="Yongin", latitude=37.2410, longitude=127.1776),
]
