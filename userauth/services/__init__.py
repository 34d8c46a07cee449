"""
Integrations with the external collaborators of the authentication service.

- :mod:`.users`: durable user accounts, in a relational database.
- :mod:`.store`: one-time codes and token revocation markers, in redis.
- :mod:`.mail`: delivery of one-time codes by e-mail.
"""
