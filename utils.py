def divide_chunks(data, n):
    """
    Split a list into n nearly equal-sized chunks.
    :param data: List to split
    :param n: Number of chunks
    :return: A list of n chunks (sublists)
    """
    k, m = divmod(len(data), n)
    return [data[i * k + min(i, m):(i + 1) * k + min(i + 1, m)] for i in range(n)]


def to_ms(seconds):
    return seconds * 1000
