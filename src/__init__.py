"""Formula IR: recipe metadata and portable install procedures."""
