"""Command line interface for hello-fargate."""
