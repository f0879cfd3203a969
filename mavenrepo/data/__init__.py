"""
In-memory indexing and generated data for the Maven repository.

This package is responsible for:
* Crawling the backing store into an in-memory artifact index.
* Writing new artifacts and replacing existing ones.
* Synthesizing maven-metadata.xml documents and checksum lines on request.
* Notifying listeners when artifacts are created or replaced.
"""
