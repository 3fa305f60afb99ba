# src/config/settings.py

"""Central configuration for the price_watch client."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the price_watch client."""

    # --- Remote endpoints (from .env / environment) ---
    SEARCH_URL: str = os.getenv(
        "SEARCH_URL", os.getenv("BASE_URL", "")
    )
    TRACK_ADD_URL: str = os.getenv("TRACK_ADD_URL", "")
    TRACK_LIST_URL: str = os.getenv("TRACK_LIST_URL", "")
    TRACK_REMOVE_URL: str = os.getenv("TRACK_REMOVE_URL", "")

    # --- HTTP ---
    REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "15"))
    HEALTH_TIMEOUT: int = 10            # Seconds per endpoint probe
    SLOW_THRESHOLD_MS: float = 5000.0   # Probe latency flagged as slow

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": "application/json",
        "Accept-Language": "zh-TW,zh;q=0.9,en-US;q=0.8",
        "Content-Type": "application/json",
    }

    # --- Tracked items ---
    CREATED_AT_FORMAT: str = "%Y/%m/%d %H:%M:%S"

    # Wire key -> TrackedItem field. The store answers with
    # human-language keys; the add request uses camelCase.
    TRACKED_ITEM_WIRE_KEYS: dict[str, str] = {
        "編號": "id",
        "id": "id",
        "商品名稱": "product_name",
        "productName": "product_name",
        "目標價格": "target_price",
        "targetPrice": "target_price",
        "建立時間": "created_at",
        "timestamp": "created_at",
        "createdAt": "created_at",
    }

    # --- User-facing messages ---
    NO_RESULTS_MESSAGE: str = "沒有找到任何結果。"
    SEARCH_ERROR_MESSAGE: str = "搜尋時發生錯誤，請稍後再試。"
    EMPTY_PRODUCT_NAME_MESSAGE: str = "請輸入商品名稱。"
    INVALID_TARGET_PRICE_MESSAGE: str = "請輸入有效的目標價格。"
    TRACK_ADD_SUCCESS_MESSAGE: str = "已加入追蹤清單！"
    TRACK_ADD_ERROR_MESSAGE: str = "加入追蹤時發生錯誤，請稍後再試。"
    TRACK_LIST_ERROR_MESSAGE: str = (
        "取得追蹤清單時發生錯誤，請稍後再試。"
    )
    TRACK_LIST_FORMAT_ERROR_MESSAGE: str = "追蹤清單資料格式錯誤。"
    TRACK_REMOVE_SUCCESS_MESSAGE: str = "已移除追蹤項目。"
    TRACK_REMOVE_ERROR_MESSAGE: str = (
        "移除追蹤項目時發生錯誤，請稍後再試。"
    )

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Endpoint registry (health check, CLI listing) ---
    ENDPOINTS: list[dict[str, str]] = [
        {
            "id": "search",
            "label": "Catalog search",
            "setting": "SEARCH_URL",
            "probe": "HEAD",
        },
        {
            "id": "track_add",
            "label": "Track add",
            "setting": "TRACK_ADD_URL",
            "probe": "HEAD",
        },
        {
            "id": "track_list",
            "label": "Track list",
            "setting": "TRACK_LIST_URL",
            "probe": "GET",
        },
        {
            "id": "track_remove",
            "label": "Track remove",
            "setting": "TRACK_REMOVE_URL",
            "probe": "HEAD",
        },
    ]
