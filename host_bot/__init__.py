"""Host side: executes privileged requests filed by agent containers"""
