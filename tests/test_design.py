"""
Tests for design inspirations
"""
import pytest

from ai_service import AIServiceError

DESIGN_REPLY = {
    'description': 'Warm teak panelling with a jaali partition and brass accents.',
    'tips': ['Source teak locally', 'Use lime plaster', 'Add a pooja niche', 'Layer jute rugs'],
}


@pytest.mark.integration
class TestDesignInspiration:
    """Test generating and listing inspirations"""

    def test_create_without_image_service(self, client, user, fake_ai):
        fake_ai.complete_json.return_value = DESIGN_REPLY

        response = client.post('/api/design/inspiration', json={
            'room': 'Living Room',
            'style': 'Contemporary Indian',
        })

        assert response.status_code == 201
        inspiration = response.get_json()
        assert inspiration['userId'] == user['id']
        assert inspiration['description'] == DESIGN_REPLY['description']
        assert inspiration['tips'] == DESIGN_REPLY['tips']
        assert inspiration['imageUrl'] is None
        assert 'Contemporary Indian Living Room' in inspiration['prompt']
        fake_ai.generate_image.assert_not_called()

    def test_create_with_image(self, client, user, fake_ai):
        fake_ai.complete_json.return_value = DESIGN_REPLY
        fake_ai.is_available.side_effect = lambda service=None: service == 'image'
        fake_ai.generate_image.return_value = 'https://images.example/living.png'

        response = client.post('/api/design/inspiration', json={
            'room': 'Living Room',
            'style': 'Minimalist',
            'description': 'Small flat in Mumbai',
        })

        assert response.get_json()['imageUrl'] == 'https://images.example/living.png'
        prompt = fake_ai.complete_json.call_args[0][1]
        assert 'Small flat in Mumbai' in prompt

    def test_image_failure_still_saves(self, client, user, fake_ai):
        fake_ai.complete_json.return_value = DESIGN_REPLY
        fake_ai.is_available.return_value = True
        fake_ai.generate_image.side_effect = AIServiceError('content policy')

        response = client.post('/api/design/inspiration', json={'room': 'Kitchen', 'style': 'Rustic'})

        assert response.status_code == 201
        assert response.get_json()['imageUrl'] is None

    def test_empty_model_output(self, client, user, fake_ai):
        fake_ai.complete_json.return_value = {}

        response = client.post('/api/design/inspiration', json={'room': 'Kitchen', 'style': 'Rustic'})

        assert response.status_code == 500
        assert client.get('/api/design/inspirations').get_json() == []

    def test_listing_is_per_user(self, client, other_client, user, other_user, fake_ai):
        fake_ai.complete_json.return_value = DESIGN_REPLY
        client.post('/api/design/inspiration', json={'room': 'Kitchen', 'style': 'Rustic'})

        assert len(client.get('/api/design/inspirations').get_json()) == 1
        assert other_client.get('/api/design/inspirations').get_json() == []

    def test_requires_login(self, client, fake_ai):
        response = client.post('/api/design/inspiration', json={'room': 'Kitchen', 'style': 'Rustic'})
        assert response.status_code == 401
        fake_ai.complete_json.assert_not_called()

    def test_requires_room(self, client, user):
        response = client.post('/api/design/inspiration', json={'style': 'Rustic'})
        assert response.status_code == 400
