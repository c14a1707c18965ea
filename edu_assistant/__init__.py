"""Student learning assistant with retrieval-augmented chat."""
