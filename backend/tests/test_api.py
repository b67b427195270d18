"""
분석 엔진 API 테스트
"""
import pytest
from fastapi.testclient import TestClient

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from saju_console.config import get_settings
from saju_console.main import app

client = TestClient(app)

CHART = {"year_pillar": "戊午", "month_pillar": "丁巳", "day_pillar": "戊寅", "time_pillar": "丁巳"}


class TestHealth:

    def test_health(self):
        assert client.get("/health").json() == {"status": "ok"}

    def test_ready(self):
        data = client.get("/ready").json()
        assert data["checks"]["ganji_60"] is True
        assert data["checks"]["twelve_spirit"] is True


class TestGanjiEndpoint:

    def test_2024(self):
        response = client.get("/api/v1/engine/ganji/2024")
        assert response.status_code == 200
        assert response.json() == {"year": 2024, "ganji": "甲辰", "hangul": "갑진", "index": 40}

    def test_pre_epoch(self):
        assert client.get("/api/v1/engine/ganji/1923").json()["ganji"] == "癸亥"

    def test_configured_epoch(self, monkeypatch):
        settings = get_settings()
        monkeypatch.setattr(settings, "epoch_year", 2024)
        monkeypatch.setattr(settings, "epoch_pillar", "갑진")
        assert client.get("/api/v1/engine/ganji/2024").json()["ganji"] == "甲辰"
        assert client.get("/api/v1/engine/ganji/1984").json()["ganji"] == "甲子"


class TestPillarEndpoints:

    def test_chart(self):
        response = client.post("/api/v1/engine/chart", json=CHART)
        assert response.status_code == 200
        data = response.json()
        assert data["day_master"] == "戊"
        assert data["pillars"][2]["sky_ten_god"] == "일간"

    def test_chart_bad_day(self):
        response = client.post("/api/v1/engine/chart", json={**CHART, "day_pillar": "甲丑"})
        assert response.status_code == 200
        data = response.json()
        assert data["day_master"] is None
        assert data["pillars"][2]["is_placeholder"] is True
        assert data["pillars"][2]["ganji"] == "?"
        # 나머지 기둥은 글자만 표시
        assert data["pillars"][0]["ganji"] == "戊午"
        assert data["pillars"][0]["sky_ten_god"] is None
        assert data["pillars"][0]["twelve_stage"] is None

    def test_pillar_bad_day(self):
        response = client.post("/api/v1/engine/pillar", json={
            "chart": {**CHART, "day_pillar": ""}, "target": "甲辰",
        })
        assert response.status_code == 200
        data = response.json()
        assert data["ganji"] == "甲辰"
        assert data["sky_ten_god"] is None
        assert data["earth_ten_god"] is None

    def test_chart_bad_year_is_placeholder(self):
        response = client.post("/api/v1/engine/chart", json={**CHART, "year_pillar": "甲丑"})
        assert response.status_code == 200
        assert response.json()["pillars"][0]["ganji"] == "?"

    def test_pillar(self):
        response = client.post("/api/v1/engine/pillar", json={
            "chart": CHART, "target": "甲辰", "spirit_basis": "year",
        })
        data = response.json()
        assert data["sky_ten_god"] == "편관"
        assert data["twelve_stage"] == "관대"
        assert data["twelve_spirit"] == "문창"

    def test_pillar_bad_target(self):
        response = client.post("/api/v1/engine/pillar", json={"chart": CHART, "target": "XX"})
        assert response.status_code == 200
        assert response.json()["is_placeholder"] is True


class TestReconcileEndpoint:

    def test_reconcile(self):
        response = client.post("/api/v1/engine/reconcile", json={
            "raw": {
                "sky:year_month": [{"code": "A", "result": "성"}, {"code": "B", "result": "패"}, {"result": "성"}],
                "earth:year_month": [{"code": "A", "result": "성"}],
            },
            "merged": {"sky:year_month": [{"code": "A", "result": "성"}]},
        })
        assert response.status_code == 200
        data = response.json()
        assert [o["code"] for o in data["outcomes"]["sky:year_month"]] == ["B", None]
        assert [o["code"] for o in data["outcomes"]["earth:year_month"]] == ["A"]
        assert data["dropped"] == {"sky:year_month": 1, "earth:year_month": 0}

    def test_bad_namespace(self):
        response = client.post("/api/v1/engine/reconcile", json={"raw": {"moon:self": []}})
        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "INVALID_NAMESPACE"


class TestRatingEndpoints:

    @pytest.mark.parametrize("body,rating,label", [
        ({"result": "failure", "degree": "excellent"}, "excellent", "◎ 대길"),
        ({"score": 0.5}, "neutral", "△ 보통"),
        ({}, "neutral", "△ 보통"),
    ])
    def test_single(self, body, rating, label):
        data = client.post("/api/v1/engine/rating/single", json=body).json()
        assert data["rating"] == rating
        assert data["label"] == label

    def test_combined(self):
        data = client.post("/api/v1/engine/rating/combined", json={
            "sky": {"result": "success"}, "earth": {"result": "success"},
        }).json()
        assert data == {
            "rating": "excellent",
            "label": "◎ 대길",
            "fortune_level": "very_good",
            "fortune_level_label": "매우좋음",
        }

    def test_combined_side_degrees(self):
        data = client.post("/api/v1/engine/rating/combined", json={
            "sky": {"degree": "excellent"}, "earth": {"degree": "excellent"},
        }).json()
        assert data["rating"] == "excellent"


class TestOverlayEndpoint:

    def test_reason_only(self):
        data = client.post("/api/v1/engine/overlay", json={
            "outcome": {"code": "A", "result": "성", "reason": "원래 이유"},
            "override": {
                "suggestion_type": "year_luck_sky",
                "pattern_name": "정관격",
                "target_char": "甲",
                "code": "A",
                "suggested_result": "성",
                "suggested_reason": "수정 이유",
            },
        }).json()
        assert data["is_modified"] is True
        assert data["result"] == "성"
        assert data["reason"] == "수정 이유"
        assert data["original"]["reason"] == "원래 이유"

    def test_no_override(self):
        data = client.post("/api/v1/engine/overlay", json={"outcome": {"code": "A", "result": "성"}}).json()
        assert data["is_modified"] is False
        assert data["original"] is None


class TestFiveYearEndpoint:

    def test_five_year(self):
        response = client.post("/api/v1/engine/five-year", json={
            "start_year": 2024,
            "birth_year": 1978,
            "decade_array": ["戊午", "己未", "庚申", "辛酉", "壬戌", "癸亥"],
            "decade_start_age": 1,
            "chart": CHART,
        })
        assert response.status_code == 200
        items = response.json()["year_lucks"]
        assert [i["ganji"] for i in items] == ["甲辰", "乙巳", "丙午", "丁未", "戊申"]
        assert items[0]["decade"]["ganji"] == "壬戌"
        assert items[0]["view"]["sky_ten_god"] == "편관"

    def test_validation(self):
        response = client.post("/api/v1/engine/five-year", json={"start_year": 2024})
        assert response.status_code == 422
