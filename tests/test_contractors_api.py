"""
Tests for the public contractor directory
"""
import pytest


@pytest.mark.integration
class TestContractorDirectory:
    """Test listing, searching and filtering"""

    def test_public_listing(self, client, contractors):
        response = client.get('/api/contractors')
        assert response.status_code == 200
        assert len(response.get_json()) == 3

    def test_empty_directory(self, client):
        assert client.get('/api/contractors').get_json() == []

    def test_search(self, client, contractors):
        result = client.get('/api/contractors?search=bath').get_json()
        assert [c['name'] for c in result] == ['Modern Bath Solutions']

    def test_specialty_filter(self, client, contractors):
        result = client.get('/api/contractors?specialty=Electrical').get_json()
        assert [c['name'] for c in result] == ['Mehta Electrical Services']

    def test_search_percent_matches_nothing(self, client, contractors):
        assert client.get('/api/contractors?search=%25').get_json() == []

    def test_blank_search_lists_all(self, client, contractors):
        assert len(client.get('/api/contractors?search=%20').get_json()) == 3

    def test_get_contractor(self, client, contractors):
        contractor = contractors[0]
        response = client.get(f"/api/contractors/{contractor['id']}")
        assert response.status_code == 200
        assert response.get_json()['name'] == 'Sharma Construction'
        assert response.get_json()['specialties'] == ['Kitchen', 'Bathroom']

    def test_unknown_contractor(self, client):
        response = client.get('/api/contractors/no-such-contractor')
        assert response.status_code == 404
        assert response.get_json() == {'error': 'Not Found', 'message': 'Contractor not found'}

    def test_reviews_of_unknown_contractor(self, client):
        assert client.get('/api/contractors/no-such-contractor/reviews').status_code == 404

    def test_reviews_empty(self, client, contractors):
        assert client.get(f"/api/contractors/{contractors[0]['id']}/reviews").get_json() == []


@pytest.mark.integration
class TestSecurityHeaders:
    """Test headers added to every response"""

    def test_headers_present(self, client):
        response = client.get('/api/contractors')
        assert response.headers['X-Content-Type-Options'] == 'nosniff'
        assert response.headers['X-Frame-Options'] == 'SAMEORIGIN'
        assert 'Content-Security-Policy' in response.headers

    def test_unknown_route_is_json(self, client):
        response = client.get('/api/nothing-here')
        assert response.status_code == 404
        assert response.get_json()['error'] == 'Not Found'
