"""Monthly budget tracker: data model, backend gateway and client-side state."""
