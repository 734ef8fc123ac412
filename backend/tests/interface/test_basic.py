"""
基础接口测试
根路径、健康检查、认证与错误响应格式
"""

import pytest

USER_HEADERS = {"X-User-Id": "user-1"}


@pytest.mark.interface
class TestBasicEndpoints:
    """基础端点测试类"""

    def test_root(self, client):
        """测试根路径"""
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Image Arena API"
        assert "version" in data
        assert "docs" in data

    def test_health(self, client):
        """测试健康检查"""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_generate_requires_user(self, client):
        """测试生成接口缺少用户标识返回401"""
        response = client.post("/api/v1/generate/flux-1", json={"prompt": "a cat"})
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_compare_requires_user(self, client):
        """测试对比接口缺少用户标识返回401"""
        response = client.post("/api/v1/generate/compare", json={"prompt": "a cat"})
        assert response.status_code == 401

    def test_images_requires_user(self, client):
        """测试图片列表缺少用户标识返回401"""
        response = client.get("/api/v1/images")
        assert response.status_code == 401

    def test_malformed_body_is_400(self, client):
        """测试请求体格式错误返回400"""
        response = client.post(
            "/api/v1/generate/flux-1",
            content="not json",
            headers={**USER_HEADERS, "Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert "error" in response.json()
