"""Infrastructure layer: Azure DevOps transport and iteration tree reading."""
