"""Application services for the wr CLI.

Services implement the release flow, coordinating between the domain layer
(core/) and infrastructure (git/, platform/).
"""
