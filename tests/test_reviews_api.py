"""
Tests for contractor reviews and rating maintenance
"""
import pytest


@pytest.mark.integration
class TestCreateReview:
    """Test posting reviews"""

    def test_review_updates_rating(self, client, user, contractors):
        contractor = contractors[0]
        for rating in (4, 5):
            response = client.post('/api/reviews', json={
                'contractorId': contractor['id'],
                'rating': rating,
                'review': 'Good work',
            })
            assert response.status_code == 201

        refreshed = client.get(f"/api/contractors/{contractor['id']}").get_json()
        assert refreshed['rating'] == 4.5
        assert refreshed['reviewCount'] == 2

    def test_review_fields(self, client, user, project, contractors):
        response = client.post('/api/reviews', json={
            'contractorId': contractors[1]['id'],
            'projectId': project['id'],
            'rating': 3,
            'review': 'Finished a week late',
        })
        review = response.get_json()
        assert review['userId'] == user['id']
        assert review['projectId'] == project['id']
        assert review['rating'] == 3
        assert review['review'] == 'Finished a week late'

    @pytest.mark.parametrize('rating', [0, 6, 'five'])
    def test_rating_out_of_range(self, client, user, contractors, rating):
        response = client.post('/api/reviews', json={
            'contractorId': contractors[0]['id'],
            'rating': rating,
        })
        assert response.status_code == 400
        assert '"rating"' in response.get_json()['message']

    def test_unknown_contractor(self, client, user):
        response = client.post('/api/reviews', json={'contractorId': 'no-such-contractor', 'rating': 4})
        assert response.status_code == 404
        assert response.get_json()['message'] == 'Contractor not found'

    def test_cannot_attach_someone_elses_project(self, other_client, other_user, project, contractors):
        response = other_client.post('/api/reviews', json={
            'contractorId': contractors[0]['id'],
            'projectId': project['id'],
            'rating': 1,
        })
        assert response.status_code == 403

    def test_requires_login(self, client, contractors):
        response = client.post('/api/reviews', json={'contractorId': contractors[0]['id'], 'rating': 5})
        assert response.status_code == 401

    def test_listed_on_contractor(self, client, user, contractors):
        contractor = contractors[2]
        client.post('/api/reviews', json={'contractorId': contractor['id'], 'rating': 5})

        reviews = client.get(f"/api/contractors/{contractor['id']}/reviews").get_json()
        assert len(reviews) == 1
        assert reviews[0]['rating'] == 5
