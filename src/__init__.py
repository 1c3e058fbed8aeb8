"""Import JMS messages from an XML export into an ActiveMQ queue."""
