"""Configuration settings for Pub Compass."""

CONFIG = {
    # Overpass API
    "overpass_url": "https://overpass-api.de/api/interpreter",
    "overpass_query_timeout": 25,  # seconds - server-side [timeout:N]
    "amenities": ("pub", "bar"),
    "search_radius": 1500,  # meters
    "fetch_timeout": 20.0,  # seconds - hard deadline per attempt
    "fetch_max_retries": 2,  # retries after the first attempt
    "fetch_retry_delay": 2.0,  # seconds - multiplied by the retry number
    "fetch_chunk_size": 8192,  # bytes
    "default_pub_name": "Unknown Pub",
    # Compass
    "heading_smoothing": 0.85,  # 0 = raw, 1 = never updates
    "heading_orientation_correction": 90,  # degrees - portrait mounting
    "magnetometer_update_interval_ms": 16,  # ~60 Hz
    "magnetometer_sensor": "magnetic",  # termux-sensor name filter
    "compass_offset": 180,  # degrees - pointer calibration
    # GPS
    "gps_timeout": 30,  # seconds
}
