"""Match-three board resolution engine built on an esper ECS world."""
